import pytest


def _cv(cv_id: str, candidate_id: str, file_name: str = "resume.pdf", upload_date: int = 1700000000000):
    from backend.hr_nexus.schemas.records import CVMetadata

    return CVMetadata(
        id=cv_id,
        candidate_id=candidate_id,
        file_name=file_name,
        upload_date=upload_date,
        content="data:application/pdf;base64,JVBERi0xLjQK",
    )


def test_registered_candidate_is_found_by_email_as_pending(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidate_by_email

    alice = make_candidate(name="Alice", email="a@x.com")
    found = get_candidate_by_email(db_session, "a@x.com")
    assert found is not None
    assert found.id == alice.id
    assert found.status == "PENDING"


def test_candidate_email_lookup_ignores_case(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidate_by_email, get_user_by_email

    make_candidate(email="Mixed@Example.com")
    assert get_candidate_by_email(db_session, "mixed@example.COM") is not None
    assert get_user_by_email(db_session, "MIXED@example.com") is not None
    assert get_candidate_by_email(db_session, "other@example.com") is None


def test_save_candidate_profile_is_an_idempotent_upsert(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidates, save_candidate_profile

    alice = make_candidate()
    save_candidate_profile(db_session, alice)
    save_candidate_profile(db_session, alice)

    matching = [c for c in get_candidates(db_session) if c.id == alice.id]
    assert matching == [alice]


def test_save_candidate_profile_replaces_in_place(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidates, save_candidate_profile

    first = make_candidate(name="First", email="first@x.com")
    second = make_candidate(name="Second", email="second@x.com")
    renamed = first.model_copy(update={"name": "First Renamed"})
    save_candidate_profile(db_session, renamed)

    rows = get_candidates(db_session)
    assert [c.id for c in rows] == [first.id, second.id]
    assert rows[0].name == "First Renamed"


def test_save_user_rejects_duplicate_email(db_session):
    from backend.hr_nexus.schemas.records import User
    from backend.hr_nexus.services.repository import get_users, save_user
    from backend.hr_nexus.utils.error_handlers import DuplicateEmailError

    save_user(db_session, User(id="u1", name="Hr", email="hr@x.com", role="HR_ADMIN", created_at=1))
    with pytest.raises(DuplicateEmailError):
        save_user(db_session, User(id="u2", name="Hr 2", email="HR@X.com", role="HR_ADMIN", created_at=2))
    assert [u.id for u in get_users(db_session)] == ["u1"]


def test_get_user_by_email_can_filter_by_role(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_user_by_email

    make_candidate(email="cand@x.com")
    assert get_user_by_email(db_session, "cand@x.com", role="HR_ADMIN") is None
    assert get_user_by_email(db_session, "cand@x.com", role="CANDIDATE").role == "CANDIDATE"


def test_get_user_by_id(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_user_by_id

    alice = make_candidate()
    assert get_user_by_id(db_session, alice.id).email == alice.email
    assert get_user_by_id(db_session, "missing") is None


def test_update_status_on_unknown_id_changes_nothing(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidates, update_candidate_status

    make_candidate()
    before = get_candidates(db_session)
    assert update_candidate_status(db_session, "nope", "VERIFIED") is None
    assert get_candidates(db_session) == before


def test_update_status_sets_status_and_advances_last_updated(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidates, update_candidate_status

    alice = make_candidate()
    update_candidate_status(db_session, alice.id, "VERIFIED")

    stored = next(c for c in get_candidates(db_session) if c.id == alice.id)
    assert stored.status == "VERIFIED"
    assert stored.last_updated > alice.last_updated


def test_reapplying_same_status_still_refreshes_last_updated(db_session, make_candidate):
    from backend.hr_nexus.services.repository import update_candidate_status

    alice = make_candidate()
    first = update_candidate_status(db_session, alice.id, "REJECTED")
    second = update_candidate_status(db_session, alice.id, "REJECTED")
    assert second.status == "REJECTED"
    assert second.last_updated > first.last_updated


def test_save_cv_appends_and_leaves_candidates_untouched(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_candidates, get_cvs, save_cv

    alice = make_candidate()
    before = get_candidates(db_session)
    save_cv(db_session, _cv("cv1", alice.id))
    save_cv(db_session, _cv("cv2", alice.id))

    assert [cv.id for cv in get_cvs(db_session)] == ["cv1", "cv2"]
    assert get_candidates(db_session) == before


def test_cvs_filtered_by_candidate(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_cvs_for_candidate, save_cv

    alice = make_candidate(email="alice@x.com")
    bob = make_candidate(name="Bob", email="bob@x.com")
    save_cv(db_session, _cv("cv-a", alice.id, file_name="alice.pdf"))
    save_cv(db_session, _cv("cv-b", bob.id, file_name="bob.pdf"))

    rows = get_cvs_for_candidate(db_session, alice.id)
    assert len(rows) == 1
    assert rows[0].file_name == "alice.pdf"


def test_attach_cv_points_profile_at_upload(db_session, make_candidate):
    from backend.hr_nexus.services.repository import attach_cv, get_candidate_by_id, get_current_cv, save_cv

    alice = make_candidate()
    old = save_cv(db_session, _cv("old", alice.id, file_name="old.pdf", upload_date=1))
    new = save_cv(db_session, _cv("new", alice.id, file_name="new.pdf", upload_date=2))
    attach_cv(db_session, alice.id, old)

    profile = get_candidate_by_id(db_session, alice.id)
    assert profile.cv_url == "old"
    assert profile.cv_file_name == "old.pdf"
    assert profile.last_updated > alice.last_updated
    # The pointer wins over upload order.
    assert get_current_cv(db_session, profile).id == "old"

    attach_cv(db_session, alice.id, new)
    assert get_current_cv(db_session, get_candidate_by_id(db_session, alice.id)).id == "new"


def test_current_cv_falls_back_to_latest_upload(db_session, make_candidate):
    from backend.hr_nexus.services.repository import get_current_cv, save_cv

    alice = make_candidate()
    assert get_current_cv(db_session, alice) is None
    save_cv(db_session, _cv("a", alice.id, upload_date=5))
    save_cv(db_session, _cv("b", alice.id, upload_date=9))
    assert get_current_cv(db_session, alice).id == "b"


def test_attach_cv_for_unknown_candidate_is_noop(db_session):
    from backend.hr_nexus.services.repository import attach_cv, get_candidates

    assert attach_cv(db_session, "ghost", _cv("x", "ghost")) is None
    assert get_candidates(db_session) == []


def test_activity_log_appends(db_session):
    from backend.hr_nexus.services.repository import get_activity, log_activity

    log_activity(db_session, "u1", "LOGIN")
    log_activity(db_session, "u1", "LOGOUT")
    assert [a.action for a in get_activity(db_session)] == ["LOGIN", "LOGOUT"]


def test_stored_json_uses_camel_case_fields(db_session, make_candidate):
    from backend.hr_nexus.store import CANDIDATES_KEY, read_collection

    make_candidate(phone="5550100", country_code="+44")
    row = read_collection(db_session, CANDIDATES_KEY)[0]
    assert {"id", "name", "email", "role", "status", "createdAt", "lastUpdated", "countryCode"} <= set(row)
    assert "cvUrl" not in row


def test_malformed_record_is_reported_as_corrupt_storage(db_session):
    from backend.hr_nexus.services.repository import get_candidates, update_candidate_status
    from backend.hr_nexus.store import CANDIDATES_KEY, get_item, set_item
    from backend.hr_nexus.utils.error_handlers import StorageCorruptionError

    set_item(db_session, CANDIDATES_KEY, '[{"id": "x", "name": "N"}]')
    with pytest.raises(StorageCorruptionError) as exc:
        get_candidates(db_session)
    assert exc.value.key == CANDIDATES_KEY
    with pytest.raises(StorageCorruptionError):
        update_candidate_status(db_session, "x", "VERIFIED")
    assert get_item(db_session, CANDIDATES_KEY) == '[{"id": "x", "name": "N"}]'


def test_unknown_status_is_rejected_before_writing(db_session, make_candidate):
    from pydantic import ValidationError

    from backend.hr_nexus.services.repository import get_candidate_by_id, update_candidate_status

    alice = make_candidate()
    with pytest.raises(ValidationError):
        update_candidate_status(db_session, alice.id, "ARCHIVED")
    stored = get_candidate_by_id(db_session, alice.id)
    assert stored.status == "PENDING"
    assert stored.last_updated == alice.last_updated
