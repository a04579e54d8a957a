"""Tests for cross-account data isolation.

These tests ensure employers and jobseekers cannot reach each other's
records through the services.
"""
import pytest


class TestApplicationIsolation:
    """Applications are visible to their applicant and the job owner only."""

    def test_jobseeker_sees_only_own_applications(
        self, test_db, job, jobseeker, other_jobseeker, application_factory, other_jobseeker_actor
    ):
        from jobboard.tracking.application_service import ApplicationService

        application_factory(job, jobseeker)
        mine = application_factory(job, other_jobseeker)

        page = ApplicationService(test_db).list_applications(other_jobseeker_actor)
        assert [a.id for a in page.items] == [mine.id]

    def test_other_employer_cannot_read_application(
        self, test_db, application, other_employer_actor
    ):
        from jobboard.exceptions import PermissionDeniedError
        from jobboard.tracking.application_service import ApplicationService

        with pytest.raises(PermissionDeniedError):
            ApplicationService(test_db).get_application(other_employer_actor, application.id)

    def test_other_employer_cannot_change_status(
        self, test_db, application, other_employer_actor
    ):
        from jobboard.exceptions import PermissionDeniedError
        from jobboard.persistence.models import ApplicationStatus
        from jobboard.tracking.application_service import ApplicationService

        with pytest.raises(PermissionDeniedError):
            ApplicationService(test_db).update_status(
                other_employer_actor, application.id, "Accepted"
            )
        assert application.status is ApplicationStatus.APPLIED

    def test_cannot_apply_as_someone_else(self, test_db, job, jobseeker, other_jobseeker):
        """The applicant is always the actor, never a caller-supplied id."""
        from jobboard.access.policy import Actor
        from jobboard.tracking.application_service import ApplicationService

        application = ApplicationService(test_db, score_mode="inline").submit_application(
            Actor.from_user(other_jobseeker), job.id
        )
        assert application.applicant_id == other_jobseeker.id
        assert application.applicant_id != jobseeker.id


class TestJobIsolation:
    """Employers manage only the jobs they posted."""

    def test_other_employer_cannot_delete_job(self, test_db, job, other_employer_actor):
        from jobboard.exceptions import PermissionDeniedError
        from jobboard.persistence.models import Job
        from jobboard.tracking.job_service import JobService

        with pytest.raises(PermissionDeniedError):
            JobService(test_db).delete_job(other_employer_actor, job.id)
        assert test_db.get(Job, job.id) is not None

    def test_other_employer_cannot_rank_applicants(self, test_db, job, other_employer_actor):
        from jobboard.exceptions import PermissionDeniedError
        from jobboard.tracking.application_service import ApplicationService

        with pytest.raises(PermissionDeniedError):
            ApplicationService(test_db).rank_applications_for_job(other_employer_actor, job.id)

    def test_hidden_jobs_not_listed_for_others(
        self, test_db, inactive_job, employer, other_employer_actor
    ):
        from jobboard.tracking.job_service import JobService

        page = JobService(test_db).list_jobs_by_user(other_employer_actor, employer.id)
        assert page.total == 0


class TestProfileIsolation:
    """Profiles expose only public fields to other users."""

    def test_employer_sees_public_fields_only(self, test_db, jobseeker, employer_actor):
        from jobboard.access.policy import PUBLIC_PROFILE_FIELDS
        from jobboard.tracking.user_service import UserService

        profile = UserService(test_db).get_user(employer_actor, jobseeker.id)
        assert set(profile) == set(PUBLIC_PROFILE_FIELDS)

    def test_password_hash_never_exposed(self, test_db, jobseeker, jobseeker_actor):
        from jobboard.tracking.user_service import UserService

        jobseeker.password_hash = "$2b$12$secret"
        test_db.commit()

        profile = UserService(test_db).get_user(jobseeker_actor, jobseeker.id)
        assert "password_hash" not in profile

    def test_cannot_overwrite_credentials(self, test_db, jobseeker, jobseeker_actor):
        from jobboard.tracking.user_service import UserService

        jobseeker.password_hash = "$2b$12$original"
        test_db.commit()

        UserService(test_db).update_user(
            jobseeker_actor, jobseeker.id, {"password_hash": "$2b$12$forged", "id": "new-id"}
        )
        test_db.refresh(jobseeker)
        assert jobseeker.password_hash == "$2b$12$original"


class TestSqlInjection:
    """Search input is bound as a parameter and LIKE-escaped."""

    @pytest.mark.parametrize(
        "payload",
        [
            "'; DROP TABLE jobs; --",
            "' OR '1'='1",
            "_",
            "\\",
        ],
    )
    def test_job_search_payloads(self, test_db, job, payload):
        from jobboard.persistence.models import Job
        from jobboard.tracking.job_service import JobService

        page = JobService(test_db).list_jobs(search=payload)
        assert page.total == 0
        assert test_db.get(Job, job.id) is not None

    def test_user_search_payload(self, test_db, admin_actor, jobseeker):
        from jobboard.tracking.user_service import UserService

        page = UserService(test_db).list_users(admin_actor, search="' OR 1=1 --")
        assert page.total == 0
