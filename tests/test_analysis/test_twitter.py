from datetime import datetime, timedelta, timezone

from insightmate.analysis.results import TweetSentiment, TweetSentimentResult, decode_model_output
from insightmate.analysis.twitter import ScoredTweet, extract_features, merge_sentiments, scale_score
from insightmate.records.models import TwitterPost

START = datetime(2026, 3, 2, 9, tzinfo=timezone.utc)  # a Monday


def _tweet(i: int, score: float = 0.0, content: str = "plain update text", hours: float = 0, author: str = "@a"):
    sentiment = "positive" if score > 0 else "negative" if score < 0 else "neutral"
    return ScoredTweet(
        tweet_id=f"tw-{i}",
        content=content,
        author=author,
        created_at=START + timedelta(hours=hours),
        sentiment=sentiment,
        score=score,
    )


def test_scale_score():
    assert scale_score(-1) == 1
    assert scale_score(0) == 3
    assert scale_score(1) == 5
    assert scale_score(0.25) == 4   # 2.5 rounds up
    assert scale_score(7) == 5      # out of range clamps


def test_merge_sentiments_aligns_by_one_based_index():
    posts = [
        TwitterPost(tweet_id="a", content="x", author="@a", created_at=START),
        TwitterPost(tweet_id="b", content="y", author="@b", created_at=START),
    ]
    result = TweetSentimentResult(analyses=[
        TweetSentiment(tweet_index=2, sentiment="NEGATIVE", sentiment_score=-0.5),
        TweetSentiment(tweet_index=9, sentiment="POSITIVE", sentiment_score=0.9),
    ])
    merged = merge_sentiments(posts, result)
    assert [(t.tweet_id, t.sentiment, t.score) for t in merged] == [("a", "neutral", 0.0), ("b", "negative", -0.5)]


def test_null_score_keeps_the_rest_of_the_batch():
    posts = [
        TwitterPost(tweet_id="a", content="x", author="@a", created_at=START),
        TwitterPost(tweet_id="b", content="y", author="@b", created_at=START),
    ]
    raw = (
        '{"analyses": ['
        '{"tweet_index": 1, "sentiment": "positive", "sentiment_score": 0.7},'
        '{"tweet_index": 2, "sentiment": null, "sentiment_score": null, "reason": null}]}'
    )
    result = decode_model_output(raw, TweetSentimentResult, lambda: TweetSentimentResult(origin="fallback"))
    assert not result.is_fallback
    merged = merge_sentiments(posts, result)
    assert [(t.sentiment, t.score) for t in merged] == [("positive", 0.7), ("neutral", 0.0)]


def test_sentiment_trend_improving():
    tweets = [_tweet(i, score=-0.5 if i < 6 else 0.5, hours=i) for i in range(12)]
    features = extract_features(tweets)
    assert features["sentiment"].trend == "improving"
    assert features["sentiment"].distribution.negative == 6


def test_activity_trend_uses_time_span_halves():
    # 3 tweets early in the span, 9 late
    hours = [0, 1, 2] + [90 + i for i in range(8)] + [100]
    tweets = [_tweet(i, hours=h) for i, h in enumerate(hours)]
    assert extract_features(tweets)["temporal_analysis"].activity_trend == "increasing"


def test_activity_trend_needs_more_than_ten_tweets():
    tweets = [_tweet(i, hours=i * 10 if i > 5 else 0) for i in range(10)]
    assert extract_features(tweets)["temporal_analysis"].activity_trend == "stable"


def test_word_and_hashtag_features():
    tweets = [
        _tweet(0, 0.6, "Loving the export feature #acme #launch", author="@a"),
        _tweet(1, 0.4, "Export feature saved my week #acme", author="@b"),
        _tweet(2, -0.8, "This export is broken http://x.io @support", author="@a"),
    ]
    features = extract_features(tweets)
    content = features["content_analysis"]

    words = {w.word: w for w in content.top_words}
    assert words["export"].frequency == 3
    assert words["export"].sentiment == "neutral"   # (0.6 + 0.4 - 0.8) / 3
    assert words["feature"].sentiment == "positive"
    assert "this" not in words
    assert [(h.hashtag, h.frequency) for h in content.top_hashtags] == [("#acme", 2), ("#launch", 1)]
    assert content.contains_links == 33
    assert content.contains_mentions == 33

    authors = features["author_analysis"]
    assert authors.total_authors == 2
    assert authors.top_authors[0].author == "@a"
    assert authors.author_diversity == 0.67


def test_temporal_peaks_are_utc():
    tweets = [_tweet(i, hours=h) for i, h in enumerate([0, 0, 0, 24, 5])]
    temporal = extract_features(tweets)["temporal_analysis"]
    assert temporal.peak_hours[0] == "9:00"
    assert temporal.peak_days[0] == "monday"
    assert "tuesday" in temporal.peak_days
