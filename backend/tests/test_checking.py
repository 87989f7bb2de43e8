from datetime import datetime, timedelta

import pytest

from app.errors import NoSuchApprovalRecord, IdentityVerificationRequired
from app.models import Identity
from app.services import checking

from conftest import add_identity

BASE_TIME = datetime(2020, 9, 1, 8, 0, 0)


def submit_many(db, count, college="计算机学院"):
    for i in range(count):
        checking.submit(db, student_id=f"20{i:05d}", name=f"Student{i}", college=college,
                        approved_time=BASE_TIME + timedelta(minutes=i))


def test_submit_assigns_id_and_reports_live_cert_status(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice", oa_certified=True)
    approval, cert_status = checking.submit(db, student_id="2020001", name="Alice",
                                            college="计算机学院", major="软件工程")
    assert approval.id is not None
    assert cert_status is True


def test_cert_status_is_recomputed_on_read(db):
    approval, cert_status = checking.submit(db, student_id="2020001", name="Alice",
                                            college="计算机学院")
    assert cert_status is False

    add_identity(db, uid=1, student_id="2020001", realname="Alice")
    db.get(Identity, 1).oa_certified = True
    db.commit()

    assert checking.get_approval(db, approval.id)[1] is True
    approval_again, cert_status = checking.query_by_uid(db, 1)
    assert approval_again.id == approval.id
    assert cert_status is True


def test_identity_number_match_certifies(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice",
                 identity_number="330102200001011234")
    checking.submit(db, student_id="2020001", name="Alice", college="计算机学院",
                    identity_number="330102200001011234")
    assert checking.query_by_uid(db, 1)[1] is True


def test_empty_identity_numbers_do_not_certify(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice", identity_number="")
    approval, cert_status = checking.submit(db, student_id="2020001", name="Alice",
                                            college="计算机学院", identity_number="")
    assert cert_status is False
    with pytest.raises(NoSuchApprovalRecord):
        checking.query_by_uid(db, 1)


def test_query_by_uid_requires_matching_name(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice", oa_certified=True)
    checking.submit(db, student_id="2020001", name="Alicia", college="计算机学院")
    with pytest.raises(NoSuchApprovalRecord):
        checking.query_by_uid(db, 1)


def test_query_by_uid_without_identity(db):
    with pytest.raises(IdentityVerificationRequired):
        checking.query_by_uid(db, 99)


def test_query_by_uid_ignores_unapproved_records(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice", oa_certified=True)
    approval, _ = checking.submit(db, student_id="2020001", name="Alice", college="计算机学院")
    approval.approved_time = None
    db.commit()
    with pytest.raises(NoSuchApprovalRecord):
        checking.query_by_uid(db, 1)


def test_list_is_newest_first_and_capped(db):
    submit_many(db, 60)
    first_page = checking.list_approvals(db, None, offset=0, count=100)
    assert len(first_page) == 50
    times = [a.approved_time for a, _ in first_page]
    assert times == sorted(times, reverse=True)
    assert first_page[0][0].name == "Student59"


def test_list_pages_do_not_overlap(db):
    submit_many(db, 60)
    first_ids = {a.id for a, _ in checking.list_approvals(db, None, offset=0, count=50)}
    second_ids = {a.id for a, _ in checking.list_approvals(db, None, offset=50, count=50)}
    assert len(second_ids) == 10
    assert not first_ids & second_ids


def test_list_filters_by_college_substring(db):
    checking.submit(db, student_id="1", name="A", college="计算机学院")
    checking.submit(db, student_id="2", name="B", college="机械学院")
    checking.submit(db, student_id="3", name="C", college="100%学院")

    assert [a.name for a, _ in checking.list_approvals(db, "计算机")] == ["A"]
    assert {a.name for a, _ in checking.list_approvals(db, "学院")} == {"A", "B", "C"}
    # Wildcards in the filter are taken literally.
    assert [a.name for a, _ in checking.list_approvals(db, "%")] == ["C"]


def test_search_by_name_substring(db):
    checking.submit(db, student_id="1", name="张三", college="x", approved_time=BASE_TIME)
    checking.submit(db, student_id="2", name="张三丰", college="x",
                    approved_time=BASE_TIME + timedelta(days=1))
    checking.submit(db, student_id="3", name="李四", college="x")

    assert [a.name for a, _ in checking.search(db, "张三", 10)] == ["张三丰", "张三"]
    assert [a.name for a, _ in checking.search(db, "张三", 1)] == ["张三丰"]


def test_delete_removes_record_and_tolerates_missing_ids(db):
    approval, _ = checking.submit(db, student_id="1", name="A", college="x")
    approval_id = approval.id
    checking.delete(db, approval_id)
    with pytest.raises(NoSuchApprovalRecord):
        checking.get_approval(db, approval_id)
    checking.delete(db, approval_id)


def test_duplicate_identity_rows_do_not_repeat_an_approval(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice", oa_certified=True)
    add_identity(db, uid=2, student_id="2020001", realname="Alice", oa_certified=True)
    approval, cert_status = checking.submit(db, student_id="2020001", name="Alice",
                                            college="计算机学院")
    assert cert_status is True

    rows = checking.list_approvals(db, None)
    assert [a.id for a, _ in rows] == [approval.id]
    assert [a.id for a, _ in checking.search(db, "Alice")] == [approval.id]


def test_certification_by_any_matching_identity(db):
    add_identity(db, uid=1, student_id="2020001", realname="Alice")
    add_identity(db, uid=2, student_id="2020001", realname="Alice", oa_certified=True)
    checking.submit(db, student_id="2020001", name="Alice", college="计算机学院")
    assert checking.list_approvals(db, None)[0][1] is True
    # uid 1 itself is neither OA-certified nor matched by identity number.
    with pytest.raises(NoSuchApprovalRecord):
        checking.query_by_uid(db, 1)
    assert checking.query_by_uid(db, 2)[1] is True
