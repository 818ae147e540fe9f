import datetime as dt

from internship_portal.models import AppraisalReport, MisconductReport
from internship_portal.models.listing import SortKey
from internship_portal.state.listing import filter_items, find_item, is_justified, patch_item, sort_items


def day(n):
    return dt.datetime(2024, 1, n, tzinfo=dt.timezone.utc)


REPORTS = (
    MisconductReport(id="1", student_name="bilal", company_name="Acme", issue_type="Absence", incident_date=day(3)),
    MisconductReport(id="2", student_name="Ayesha", company_name="Globex", issue_type="Conduct", incident_date=day(1)),
    MisconductReport(id="3", student_name="Chen", company_name="ACME Labs", issue_type="Absence"),
    MisconductReport(id="4", student_name="Dana", company_name="Initech", issue_type="Late", incident_date=day(2)),
)


def fields(report):
    return (report.student_name, report.company_name, report.issue_type)


def test_filter_is_case_insensitive_and_order_preserving():
    result = filter_items(REPORTS, "  acme ", fields)
    assert [r.id for r in result] == ["1", "3"]


def test_blank_filter_returns_everything_as_a_copy():
    result = filter_items(REPORTS, "   ", fields)
    assert result == list(REPORTS)
    assert result is not REPORTS


def test_date_sort_puts_missing_dates_last_in_both_directions():
    newest = sort_items(REPORTS, SortKey.DATE_DESC, date=lambda r: r.sort_date)
    oldest = sort_items(REPORTS, SortKey.DATE_ASC, date=lambda r: r.sort_date)
    assert [r.id for r in newest] == ["1", "4", "2", "3"]
    assert [r.id for r in oldest] == ["2", "4", "1", "3"]


def test_name_sort_ignores_case():
    ordered = sort_items(REPORTS, "name-asc", name=lambda r: r.student_name)
    assert [r.student_name for r in ordered] == ["Ayesha", "bilal", "Chen", "Dana"]
    reverse = sort_items(REPORTS, "name-desc", name=lambda r: r.student_name)
    assert [r.student_name for r in reverse] == ["Dana", "Chen", "bilal", "Ayesha"]


def test_rating_sort_and_unknown_keys():
    appraisals = [
        AppraisalReport(id="a", overall_rating=3.5),
        AppraisalReport(id="b", overall_rating=4.8),
        AppraisalReport(id="c", overall_rating=2.0),
    ]
    best = sort_items(appraisals, SortKey.RATING_DESC, rating=lambda r: r.overall_rating)
    assert [r.id for r in best] == ["b", "a", "c"]
    assert sort_items(appraisals, "popularity", rating=lambda r: r.overall_rating) == appraisals
    # No rating getter: input order is kept.
    assert sort_items(appraisals, SortKey.RATING_ASC) == appraisals


def test_sort_never_mutates_input():
    snapshot = list(REPORTS)
    sort_items(REPORTS, SortKey.NAME_DESC, name=lambda r: r.student_name)
    assert list(REPORTS) == snapshot


def test_patch_only_touches_matching_item():
    patched = patch_item(REPORTS, "2", status="Resolved", supervisor_comments="Handled")
    assert patched[1].status == "Resolved"
    assert patched[1].supervisor_comments == "Handled"
    assert patched[0] is REPORTS[0]
    assert REPORTS[1].status == "Pending"
    assert find_item(patched, "2") is patched[1]
    assert find_item(patched, "missing") is None


def test_justification_requires_visible_text():
    assert not is_justified(None)
    assert not is_justified("")
    assert not is_justified(" \n\t ")
    assert is_justified("  ok ")


def test_unrated_appraisals_sort_last_both_ways():
    appraisals = [
        AppraisalReport(id="unrated"),
        AppraisalReport(id="low", overall_rating=1.5),
        AppraisalReport(id="high", overall_rating=4.0),
    ]
    rating = lambda r: r.overall_rating
    assert [r.id for r in sort_items(appraisals, SortKey.RATING_DESC, rating=rating)] == ["high", "low", "unrated"]
    assert [r.id for r in sort_items(appraisals, SortKey.RATING_ASC, rating=rating)] == ["low", "high", "unrated"]


def test_appraisal_without_rating_parses_as_unrated():
    assert AppraisalReport.from_api({"_id": "r1"}).overall_rating is None
    assert AppraisalReport.from_api({"_id": "r2", "overallRating": "4"}).overall_rating == 4.0
