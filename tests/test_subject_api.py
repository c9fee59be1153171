"""과목/통계/헬스체크 API 테스트."""

from conftest import run
from config.exam import SUBJECTS
from services.cache import CacheService
from test_cache_service import BrokenStore


def test_read_subjects_returns_all_nine_sorted_by_code(client, cache):
    res = client.get("/subjects")

    assert res.status_code == 200
    body = res.json()
    assert body == sorted(SUBJECTS, key=lambda s: s["code"])
    assert run(cache.get("subjects:all")) == body


def test_score_level_statistics(client):
    res = client.get("/subjects/statistics/score-levels")

    assert res.status_code == 200
    by_code = {row["subjectCode"]: row for row in res.json()}
    assert len(by_code) == len(SUBJECTS)

    assert by_code["TOAN"] == {
        "subjectCode": "TOAN",
        "subjectName": "Toán",
        "levelExcellent": 3,
        "levelGood": 2,
        "levelAverage": 0,
        "levelPoor": 0,
        "total": 5,
    }
    vat_li = by_code["VAT_LI"]
    assert (vat_li["levelExcellent"], vat_li["levelGood"], vat_li["levelAverage"], vat_li["levelPoor"]) == (2, 1, 0, 1)
    for row in by_code.values():
        assert row["levelExcellent"] + row["levelGood"] + row["levelAverage"] + row["levelPoor"] == row["total"]


def test_score_level_boundaries(client):
    by_code = {row["subjectCode"]: row for row in client.get("/subjects/statistics/score-levels").json()}

    # NGOAI_NGU: 8.0 → 우수, 5.2 → 보통 / SINH_HOC: 7.5 → 양호, 3.5 → 미흡
    assert by_code["NGOAI_NGU"]["levelExcellent"] == 1
    assert by_code["NGOAI_NGU"]["levelAverage"] == 1
    assert by_code["SINH_HOC"]["levelGood"] == 1
    assert by_code["SINH_HOC"]["levelPoor"] == 1


def test_score_distribution_has_twenty_buckets_per_subject(client):
    res = client.get("/subjects/statistics/score-distribution")

    assert res.status_code == 200
    body = res.json()
    assert [row["subjectCode"] for row in body] == sorted(s["code"] for s in SUBJECTS)

    toan = next(row for row in body if row["subjectCode"] == "TOAN")
    assert len(toan["distribution"]) == 20
    assert toan["distribution"][0]["range"] == "[0, 0.5]"
    assert toan["distribution"][-1]["range"] == "[9.5, 10]"
    counts = [bucket["count"] for bucket in toan["distribution"]]
    assert sum(counts) == 5
    # 6.0, 7.0, 8.5, 9.0, 10(마지막 구간)
    assert [i for i, c in enumerate(counts) if c] == [12, 14, 17, 18, 19]


def test_health_reports_connected_cache(client):
    res = client.get("/health")

    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["services"]["redis"] == {"status": "connected", "healthy": True}


def test_api_keeps_working_when_cache_is_down(client_factory):
    client = client_factory(CacheService(BrokenStore()))

    health = client.get("/health").json()
    assert health["status"] == "ok"
    assert health["services"]["redis"] == {"status": "disconnected", "healthy": False}

    assert client.get("/students/01000001/scores").json()["sbd"] == "01000001"
    assert [s["sbd"] for s in client.get("/students/top/group-a").json()] == ["01000002", "01000001", "01000005"]
    assert len(client.get("/subjects").json()) == len(SUBJECTS)
    assert client.get("/subjects/statistics/score-levels").status_code == 200


def test_root_banner(client):
    res = client.get("/")

    assert res.status_code == 200
    assert "message" in res.json()
