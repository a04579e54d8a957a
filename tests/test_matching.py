"""Tests for fit scoring and ranking."""
import pytest
from datetime import datetime, timedelta, timezone

from jobboard.exceptions import ValidationError
from jobboard.matching.fit_scorer import (
    FitScorer,
    compute_score,
    experience_years,
    parse_date,
    score_breakdown,
    skills_match,
)
from jobboard.matching.scorer import rank_applications, rank_jobs_for_applicant
from jobboard.matching.scorer_protocol import Scorer

START = datetime(2015, 1, 1, tzinfo=timezone.utc)


def years(n: float) -> dict:
    """Experience entry spanning exactly n 365-day years."""
    return {"start_date": START, "end_date": START + timedelta(days=365 * n)}


@pytest.fixture
def scenario_job():
    return {"skills": ["React", "Node.js"]}


@pytest.fixture
def scenario_applicant():
    return {
        "skills": ["react", "express"],
        "experience": [years(5)],
        "education": [{"degree": "Bachelor"}, {"degree": "Master"}],
    }


class TestSkillsMatch:
    """Tests for skill string matching."""

    def test_case_insensitive(self):
        assert skills_match("React", "react")

    def test_containment_both_directions(self):
        assert skills_match("React", "ReactJS")
        assert skills_match("ReactJS", "React")

    def test_no_match(self):
        assert not skills_match("Node.js", "express")

    def test_blank_never_matches(self):
        """A blank skill would otherwise be contained in everything."""
        assert not skills_match("Python", "")
        assert not skills_match("  ", "Python")


class TestFitScorer:
    """Tests for the fit score components."""

    def test_documented_scenario(self, scenario_job, scenario_applicant):
        """React/Node job vs react/express applicant with 5 years and 2 degrees."""
        fit = score_breakdown(scenario_job, scenario_applicant)

        assert fit.skills == pytest.approx(25)
        assert fit.experience == pytest.approx(15)
        assert fit.education == pytest.approx(40 / 3)
        assert fit.matched_skills == ["React"]
        assert compute_score(scenario_job, scenario_applicant) == 53

    def test_scenario_with_models(self, job, jobseeker):
        """ORM instances score the same as plain mappings."""
        assert FitScorer().score(job, jobseeker) == 53

    def test_empty_profile_scores_zero(self, scenario_job):
        assert compute_score(scenario_job, {}) == 0
        assert compute_score(scenario_job, {"skills": [], "experience": [], "education": []}) == 0

    def test_empty_job_skills_zero_skill_component(self, scenario_applicant):
        fit = score_breakdown({"skills": []}, scenario_applicant)
        assert fit.skills == 0
        assert fit.matched_skills == []

    def test_empty_job_skills_keeps_other_components(self, scenario_applicant):
        """Experience and education still count when the job lists no skills."""
        assert compute_score({"skills": []}, scenario_applicant) == 28

    def test_no_skills_and_no_profile_is_zero(self):
        assert compute_score({"skills": []}, {}) == 0

    def test_full_marks(self):
        applicant = {
            "skills": ["python", "sql"],
            "experience": [years(12)],
            "education": [{}, {}, {}, {}],
        }
        assert compute_score({"skills": ["Python", "SQL"]}, applicant) == 100

    def test_caps_keep_score_in_range(self):
        applicant = {
            "skills": ["a", "b", "c"],
            "experience": [years(8), years(8), years(8)],
            "education": [{}] * 10,
        }
        score = compute_score({"skills": ["a"]}, applicant)
        assert 0 <= score <= 100
        assert score == 100

    def test_experience_capped_at_ten_years(self):
        fit = score_breakdown({}, {"experience": [years(25)]})
        assert fit.experience == pytest.approx(30)
        assert fit.experience_years == pytest.approx(25)

    def test_education_capped_at_three_entries(self):
        three = score_breakdown({}, {"education": [{}] * 3})
        five = score_breakdown({}, {"education": [{}] * 5})
        assert three.education == five.education == pytest.approx(20)

    def test_rounds_half_up(self):
        """7.5 rounds to 8, as Math.round would."""
        applicant = {"experience": [years(2.5)]}
        assert score_breakdown({}, applicant).experience == pytest.approx(7.5)
        assert compute_score({}, applicant) == 8

    def test_ongoing_experience_contributes_nothing(self):
        applicant = {"experience": [{"start_date": START, "end_date": None}]}
        assert compute_score({}, applicant) == 0

    def test_string_dates_are_parsed(self):
        applicant = {"experience": [{"start_date": "2015-01-01", "end_date": "2020-01-01"}]}
        fit = score_breakdown({}, applicant)
        assert fit.experience_years == pytest.approx(1826 / 365)

    def test_reversed_dates_contribute_zero(self):
        """A malformed entry is skipped while the others still count."""
        applicant = {
            "experience": [
                {"start_date": START, "end_date": START - timedelta(days=365)},
                years(5),
            ]
        }
        fit = score_breakdown({}, applicant)
        assert fit.experience == pytest.approx(15)

    def test_unparseable_dates_contribute_zero(self):
        applicant = {"experience": [{"start_date": "not a date", "end_date": "2020-01-01"}]}
        assert compute_score({}, applicant) == 0

    def test_malformed_skills_are_ignored(self):
        applicant = {"skills": [None, 42, "", "python"]}
        fit = score_breakdown({"skills": ["Python", "Go"]}, applicant)
        assert fit.matched_skills == ["Python"]
        assert fit.skills == pytest.approx(25)

    def test_each_job_skill_counted_once(self):
        """Several applicant skills matching one job skill count it once."""
        applicant = {"skills": ["react", "reactjs", "react native"]}
        fit = score_breakdown({"skills": ["React", "Vue"]}, applicant)
        assert fit.skills == pytest.approx(25)

    def test_idempotent(self, scenario_job, scenario_applicant):
        scores = {compute_score(scenario_job, scenario_applicant) for _ in range(5)}
        assert scores == {53}

    def test_more_matching_skills_never_lowers_score(self, scenario_job, scenario_applicant):
        before = compute_score(scenario_job, scenario_applicant)
        scenario_applicant["skills"].append("node")
        assert compute_score(scenario_job, scenario_applicant) >= before

    def test_more_experience_never_lowers_score(self, scenario_job, scenario_applicant):
        before = compute_score(scenario_job, scenario_applicant)
        scenario_applicant["experience"].append(years(1))
        assert compute_score(scenario_job, scenario_applicant) >= before

    def test_fit_scorer_satisfies_protocol(self):
        assert isinstance(FitScorer(), Scorer)


class TestDateHelpers:
    """Tests for date parsing used by scoring and profile input."""

    def test_parse_naive_datetime_as_utc(self):
        assert parse_date(datetime(2020, 1, 1)).tzinfo == timezone.utc

    def test_parse_empty(self):
        assert parse_date(None) is None
        assert parse_date("") is None

    def test_parse_garbage_raises(self):
        with pytest.raises(ValidationError):
            parse_date("yesterday-ish")

    def test_reversed_entry_raises(self):
        with pytest.raises(ValidationError):
            experience_years({"start_date": "2020-01-01", "end_date": "2019-01-01"})

    def test_missing_date_is_zero(self):
        assert experience_years({"start_date": "2020-01-01"}) == 0


class TestRanking:
    """Tests for ranking jobs and applications by score."""

    def test_rank_jobs_best_fit_first(self, job_factory, employer, jobseeker):
        weak = job_factory(employer, title="Backend", skills=["Express", "Go", "Rust"])
        strong = job_factory(employer, title="Frontend", skills=["React"])
        job_factory(employer, title="Data", skills=["Spark"])

        ranked = rank_jobs_for_applicant([weak, strong], jobseeker)

        assert [r.job.title for r in ranked] == ["Frontend", "Backend"]
        assert ranked[0].matched_skills == ["React"]

    def test_rank_jobs_drops_unmatched(self, job_factory, employer, jobseeker):
        unrelated = job_factory(employer, skills=["Spark"])
        assert rank_jobs_for_applicant([unrelated], jobseeker) == []
        assert len(rank_jobs_for_applicant([unrelated], jobseeker, require_skill_match=False)) == 1

    def test_rank_jobs_min_score_and_limit(self, job_factory, employer, jobseeker):
        jobs = [job_factory(employer, skills=["React"]) for _ in range(3)]
        assert len(rank_jobs_for_applicant(jobs, jobseeker, limit=2)) == 2
        assert rank_jobs_for_applicant(jobs, jobseeker, min_score=101) == []

    def test_rank_applications(self, application_factory, job, jobseeker, other_jobseeker):
        low = application_factory(job, jobseeker, score=40)
        high = application_factory(job, other_jobseeker, score=90)
        assert rank_applications([low, high]) == [high, low]
