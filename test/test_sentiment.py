import pytest

from review_insights.schemas import RawReview
from review_insights.sentiment import (
    analyze_review, clean_text, confidence_for, label_for, lexicon_score, process_reviews,
)

WEIGHTS = {"good": 3, "great": 5, "bad": -3, "awful": -5, "fine": 1}


def fake_lexicon(text):
    return sum(WEIGHTS.get(w, 0) for w in text.split())


def _raw(rid, text, **kw):
    return RawReview(review_id=rid, review_text=text, **kw)


def test_clean_text():
    assert clean_text("<p>Great   Product!!</p>\n It's <b>fine</b>") == "great product it s fine"
    assert clean_text("   ") == ""
    assert clean_text(None) == ""


@pytest.mark.parametrize("score,label", [
    (3, "positive"), (2.01, "positive"), (2, "neutral"), (0, "neutral"),
    (-2, "neutral"), (-3, "negative"), (-2.5, "negative"),
])
def test_label_thresholds(score, label):
    assert label_for(score) == label


def test_confidence():
    assert confidence_for(5) == 0.5
    assert confidence_for(-5) == 0.5
    assert confidence_for(10) == 1.0
    assert confidence_for(20) == 1.0
    scores = [0, 1, 3, 7, 9.5, 10, 15]
    confs = [confidence_for(s) for s in scores]
    assert confs == sorted(confs)


def test_blank_text_short_circuits():
    def boom(_):
        raise AssertionError("lexicon should not be called")

    r = analyze_review(_raw("1", "   <br/> "), lexicon=boom)
    assert (r.score, r.label, r.confidence, r.cleaned_text) == (0, "neutral", 0, "")


def test_analyze_review_passthrough():
    raw = _raw("42", "Great, GOOD stuff", rating=5, product_id="B1", product_name="B1",
               review_date="2024-01-01T00:00:00.000Z", date="2024-01-01")
    r = analyze_review(raw, lexicon=fake_lexicon)
    assert r.id == "42"
    assert r.text == "Great, GOOD stuff"
    assert r.cleaned_text == "great good stuff"
    assert r.score == 8
    assert r.label == "positive"
    assert r.confidence == pytest.approx(0.8)
    assert (r.product_id, r.product_name, r.rating) == ("B1", "B1", 5)
    assert r.review_date == "2024-01-01T00:00:00.000Z"
    assert r.date == "2024-01-01"


def test_default_lexicon_polarity():
    assert lexicon_score("love love great excellent") > 2
    assert lexicon_score("terrible horrible awful bad") < -2
    assert lexicon_score("the and of") == 0
    pos = analyze_review(_raw("p", "I love it, great and excellent!"))
    neg = analyze_review(_raw("n", "Terrible. Horrible, awful taste."))
    assert pos.label == "positive"
    assert neg.label == "negative"


def test_process_reviews_keeps_order_and_reports_progress():
    raws = [_raw(str(i), ["good great", "awful bad", "fine"][i % 3]) for i in range(2500)]
    seen = []
    result = process_reviews(raws, progress_callback=seen.append, lexicon=fake_lexicon)

    assert [r.id for r in result.reviews] == [str(i) for i in range(2500)]
    assert [(p.processed, p.percentage) for p in seen] == [(1000, 40), (2000, 80), (2500, 100)]
    assert all(p.total == 2500 for p in seen)

    dist = result.summary.sentiment_distribution
    assert result.summary.total_reviews == 2500
    assert sum(b.count for b in dist.values()) == 2500
    assert dist["positive"].count == 834


def test_progress_callback_does_not_change_output():
    raws = [_raw(str(i), "good" if i % 2 else "bad") for i in range(30)]
    a = process_reviews(raws, lexicon=fake_lexicon, batch_size=7)
    b = process_reviews(raws, progress_callback=lambda p: None, lexicon=fake_lexicon, batch_size=7)
    assert a.reviews == b.reviews
    assert a.summary == b.summary


def test_exact_multiple_of_batch_reports_once_at_end():
    raws = [_raw(str(i), "fine") for i in range(2000)]
    seen = []
    process_reviews(raws, progress_callback=seen.append, lexicon=fake_lexicon)
    assert [p.processed for p in seen] == [1000, 2000]


def test_process_empty():
    result = process_reviews([], lexicon=fake_lexicon)
    assert result.reviews == []
    assert result.summary.total_reviews == 0
