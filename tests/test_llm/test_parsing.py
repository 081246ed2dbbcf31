from insightmate.llm.parsing import extract_json


def test_plain_json():
    assert extract_json('{"a": 1}') == {"a": 1}


def test_fenced_json():
    assert extract_json('Here you go:\n```json\n{"a": [1, 2]}\n```\nDone.') == {"a": [1, 2]}


def test_fence_without_language():
    assert extract_json("```\n[1, 2]\n```") == [1, 2]


def test_object_inside_prose():
    assert extract_json('The answer is {"summary": "ok"} as requested.') == {"summary": "ok"}


def test_array_inside_prose():
    assert extract_json("scores: [0.5, -0.2] end") == [0.5, -0.2]


def test_unparseable():
    assert extract_json("no json here") is None
    assert extract_json("{broken") is None
    assert extract_json("") is None
    assert extract_json(None) is None
