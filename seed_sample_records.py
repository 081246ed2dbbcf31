"""
Seed a realistic sample of every source for local development.

Simulates about three weeks of activity for a SaaS product:
- Support tickets around billing, mobile login and exports
- Discord chatter with a couple of release announcements
- GitHub issues across UI, API and performance
- Inbound email from customers, vendors and newsletters
- Tweets and forum threads reacting to a new release

Records go through the normal ingest path so the daily counters match.
Re-running is safe: records that already exist are skipped.
"""

import asyncio
from datetime import datetime, timedelta, timezone

from insightmate.database import async_session_factory, create_tables
from insightmate.records.models import (
    DiscordMessage,
    Email,
    ForumPost,
    GithubIssue,
    SupportTicket,
    TwitterPost,
)
from insightmate.records.schemas import (
    DiscordMessageCreate,
    EmailCreate,
    ForumPostCreate,
    GithubIssueCreate,
    TicketCreate,
    TwitterPostCreate,
)
from insightmate.records.service import DuplicateRecordError, ingest_record

BASE = datetime(2026, 9, 28, 9, tzinfo=timezone.utc)


def dt(day_offset: float, hour: int = 9):
    """BASE + day_offset days, at the given hour."""
    return BASE + timedelta(days=day_offset, hours=hour - 9)


TICKETS = [
    ("T-1001", "I was charged twice for the October invoice, please refund one.", "open", "u-301", dt(0)),
    ("T-1002", "Mobile app logs me out every time I switch networks.", "open", "u-118", dt(1, 11)),
    ("T-1003", "CSV export from the dashboard is missing the last column.", "pending", "u-220", dt(2, 14)),
    ("T-1004", "Can't log in on Android after updating to 4.2.", "open", "u-412", dt(5, 8)),
    ("T-1005", "Billing page shows the wrong currency for EU customers.", "closed", "u-077", dt(7, 16)),
    ("T-1006", "API returns 502 when listing more than 500 projects.", "open", "u-510", dt(9, 10)),
    ("T-1007", "Push notifications arrive hours late on iOS.", "pending", "u-118", dt(12, 19)),
    ("T-1008", "Please add SSO for our Okta tenant.", "open", "u-601", dt(15, 13)),
    ("T-1009", "Dashboard charts don't load in Safari.", "open", "u-220", dt(18, 9)),
    ("T-1010", "Refund still not processed after two weeks.", "open", "u-301", dt(20, 15)),
]

DISCORD = [
    ("m-5001", "general", "Anyone else seeing slow dashboard loads today?", "a-11", dt(1, 10)),
    ("m-5002", "announcements", "Version 4.2 is live! Offline mode, faster sync and a new export dialog.", "a-01", dt(4, 17)),
    ("m-5003", "support", "Android login loop after the update, any workaround?", "a-23", dt(5, 9)),
    ("m-5004", "general", "Love the new export dialog, huge time saver.", "a-31", dt(6, 12)),
    ("m-5005", "announcements", "Scheduled maintenance Saturday 02:00-04:00 UTC for database upgrades.", "a-01", dt(10, 15)),
    ("m-5006", "support", "Push notifications are delayed again on iOS.", "a-23", dt(12, 20)),
    ("m-5007", "general", "Is SSO on the roadmap?", "a-44", dt(16, 11)),
]

GITHUB = [
    (4101, "acme/web", "Charts blank in Safari 17", "Chart canvas never renders on Safari 17.1.", "open", dt(2, 10)),
    (4102, "acme/api", "502 on /projects with large accounts", "Pagination missing on the projects endpoint.", "open", dt(8, 9)),
    (4103, "acme/mobile", "Android session lost on network change", "Token refresh races with connectivity change.", "open", dt(5, 15)),
    (4104, "acme/web", "Export dialog drops last column", "Off-by-one in column mapping.", "closed", dt(3, 11)),
    (4105, "acme/api", "Slow query on activity feed", "Feed query scans full events table.", "open", dt(14, 16)),
    (4106, "acme/docs", "Document SSO setup", "Need a guide for Okta and Azure AD.", "open", dt(17, 10)),
]

EMAILS = [
    ("e-9001", "URGENT: duplicate charge on our account", "We were billed twice this month, please fix before our finance close on Friday.", "cfo@northwind.example", dt(0, 8)),
    ("e-9002", "Weekly product newsletter", "Here's what shipped this week across the platform.", "news@acme.example", dt(3, 6)),
    ("e-9003", "Meeting request: Q4 roadmap review", "Can we find 30 minutes next week to walk through the roadmap?", "pm@contoso.example", dt(6, 13)),
    ("e-9004", "Security alert: new login from unknown device", "A new sign-in to the admin console was detected.", "security@acme.example", dt(9, 2)),
    ("e-9005", "Refund status?", "Following up on the refund requested two weeks ago.", "cfo@northwind.example", dt(20, 9)),
    ("e-9006", "Partnership opportunity", "We'd like to explore an integration partnership.", "bd@fabrikam.example", dt(11, 15)),
]

TWEETS = [
    ("tw-1", "Just tried the new offline mode in 4.2, it's amazing! #acme #productivity", "@dana", dt(4, 18)),
    ("tw-2", "Anyone else stuck in a login loop on Android? #acme", "@lee", dt(5, 10)),
    ("tw-3", "Export dialog in 4.2 is great, finally all columns #acme", "@sam", dt(6, 14)),
    ("tw-4", "Dashboard still broken in Safari, this bug is getting old", "@kim", dt(9, 21)),
    ("tw-5", "Announcing our migration to @acme for all client reporting https://example.com/blog", "@agency", dt(13, 9)),
    ("tw-6", "Notifications an hour late again. Problem since the update.", "@lee", dt(12, 22)),
    ("tw-7", "Is SSO coming soon? Our security team keeps asking #sso", "@ops_jo", dt(16, 12)),
]

FORUM = [
    ("p-301", "Feature Requests", "SSO with Okta", "We need SAML SSO before rolling out company-wide.", "jo", dt(15, 10)),
    ("p-302", "Feature Requests", "Dark mode for dashboard", "Long sessions would be easier on the eyes.", "mika", dt(8, 20)),
    ("p-303", "Troubleshooting", "Android logout loop", "Clearing cache doesn't help; started with 4.2.", "lee", dt(5, 11)),
    ("p-304", "Troubleshooting", "Safari charts blank", "Works in Chrome, blank in Safari 17.", "kim", dt(9, 8)),
    ("p-305", "Announcements", "4.2 release notes", "Offline mode, faster sync, new export dialog.", "acme-team", dt(4, 17)),
    ("p-306", "Troubleshooting", "Delayed push notifications", "iOS notifications delayed by up to an hour.", "sam", dt(12, 21)),
]


def _records():
    for ticket_id, content, status, user_id, at in TICKETS:
        yield SupportTicket, TicketCreate(ticket_id=ticket_id, content=content, status=status, user_id=user_id, created_at=at)
    for message_id, channel_id, content, author_id, at in DISCORD:
        yield DiscordMessage, DiscordMessageCreate(
            message_id=message_id, channel_id=channel_id, content=content, author_id=author_id, created_at=at,
        )
    for issue_id, repo, title, body, state, at in GITHUB:
        yield GithubIssue, GithubIssueCreate(issue_id=issue_id, repo=repo, title=title, body=body, state=state, created_at=at)
    for email_id, subject, body, sender, at in EMAILS:
        yield Email, EmailCreate(email_id=email_id, subject=subject, body=body, sender=sender, created_at=at)
    for tweet_id, content, author, at in TWEETS:
        yield TwitterPost, TwitterPostCreate(tweet_id=tweet_id, content=content, author=author, created_at=at)
    for post_id, forum, title, content, author, at in FORUM:
        yield ForumPost, ForumPostCreate(post_id=post_id, forum=forum, title=title, content=content, author=author, created_at=at)


async def seed():
    await create_tables()
    inserted = skipped = 0
    async with async_session_factory() as db:
        for model, data in _records():
            try:
                await ingest_record(db, model, data)
                inserted += 1
            except DuplicateRecordError:
                skipped += 1
    print(f"Inserted {inserted} sample records ({skipped} already present)")


if __name__ == "__main__":
    asyncio.run(seed())
