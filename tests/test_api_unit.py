"""
Unit tests using FastAPI TestClient (no separate server needed).
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from wordwise.config import Settings, get_settings
from wordwise.core.pipeline import AnnotationOptions
from wordwise.server.deps import get_job_store
from wordwise.server.main import app


DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def client(store):
    app.dependency_overrides[get_settings] = lambda: Settings(data_dir=DATA_DIR, language="en", hint_level=1)
    app.dependency_overrides[get_job_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["name"] == "Wordwise API"


class TestAnnotateUnit:
    def test_annotate(self, client):
        r = client.post("/api/annotate", json={"text": "I'm not ascertained."})
        assert r.status_code == 200
        body = r.json()
        assert body["text"] == "I'm not <ruby>ascertained<rt>discovered by a method</rt></ruby>."
        assert body["matches"] == [{"surface": "ascertained.", "tokens": 1, "term": "ascertained"}]

    def test_annotate_options(self, client):
        r = client.post("/api/annotate", json={
            "text": "pictorials.",
            "detail": 2,
            "show_phoneme": True,
            "formatter": "bracket",
        })
        assert r.json()["text"] == "pictorials (/pɪkˈtɔriəl/ of or relating to painting or drawing)."

    def test_annotate_phrase_match(self, client):
        r = client.post("/api/annotate", json={"text": "in someone's pocket", "hint_level": 1})
        assert r.json()["matches"] == [
            {"surface": "in someone's pocket", "tokens": 3, "term": "in someone's pocket"}
        ]

    def test_annotate_bad_detail(self, client):
        r = client.post("/api/annotate", json={"text": "x", "detail": 3})
        assert r.status_code == 422

    def test_annotate_unknown_formatter(self, client):
        r = client.post("/api/annotate", json={"text": "x", "formatter": "sidenote"})
        assert r.status_code == 400

    def test_annotate_unknown_language(self, client):
        r = client.post("/api/annotate", json={"text": "x", "language": "zz"})
        assert r.status_code == 404

    @pytest.mark.parametrize("language", ["../en", "x/../../tmp/y", "en.csv", ""])
    def test_annotate_invalid_language(self, client, language):
        r = client.post("/api/annotate", json={"text": "x", "language": language})
        assert r.status_code == 422


class TestLexiconUnit:
    def test_lookup_term(self, client):
        r = client.get("/api/lexicons/en/terms/pictorial")
        assert r.status_code == 200
        assert r.json()["short_gloss"] == "relating to a drawing"

    def test_lookup_follows_lemma(self, client):
        r = client.get("/api/lexicons/en/terms/riboses")
        assert r.json()["term"] == "ribose"

    def test_lookup_below_hint_level(self, client):
        r = client.get("/api/lexicons/en/terms/pictorial", params={"hint_level": 3})
        assert r.status_code == 404

    def test_lookup_invalid_language(self, client):
        r = client.get("/api/lexicons/en.csv/terms/pictorial")
        assert r.status_code == 404
        assert "invalid language identifier" in r.json()["detail"]

    def test_formatters(self, client):
        r = client.get("/api/formatters")
        assert {"ruby", "bracket", "tooltip"} <= set(r.json()["formatters"])


class TestJobsUnit:
    def test_job_end_to_end(self, client, tmp_path):
        book = tmp_path / "story.html"
        book.write_text("<p>An utter cacophony.</p>", encoding="utf-8")

        r = client.post("/api/jobs", json={"book": str(book), "hint_level": 4})
        assert r.status_code == 200
        job_id = r.json()["id"]

        # background task has run by the time the request returns
        r = client.get(f"/api/jobs/{job_id}")
        job = r.json()
        assert job["status"] == "done"
        assert job["progress"] == 1.0
        assert job["output_path"] == str(tmp_path / "story.wordwise.html")

        output = (tmp_path / "story.wordwise.html").read_text(encoding="utf-8")
        assert output == "<p>An utter <ruby>cacophony<rt>harsh mixture of sounds</rt></ruby>.</p>"

        r = client.get("/api/jobs")
        assert [j["id"] for j in r.json()["jobs"]] == [job_id]

    def test_job_long_definitions(self, client, tmp_path):
        book = tmp_path / "story.txt"
        book.write_text("utter\n", encoding="utf-8")
        output = tmp_path / "out.txt"

        r = client.post("/api/jobs", json={"book": str(book), "output": str(output), "allow_long": True})

        assert r.json()["options"]["max_definition_detail"] == 2
        assert output.read_text(encoding="utf-8") == (
            "<ruby>utter<rt>without qualification; used as an intensifier</rt></ruby>\n"
        )

    def test_job_unsupported_format(self, client, tmp_path):
        r = client.post("/api/jobs", json={"book": str(tmp_path / "book.pdf")})
        assert r.status_code == 400

    def test_job_missing_book(self, client, tmp_path):
        r = client.post("/api/jobs", json={"book": str(tmp_path / "missing.epub")})
        assert r.status_code == 404

    def test_job_bad_formatter(self, client, tmp_path):
        book = tmp_path / "story.txt"
        book.write_text("x", encoding="utf-8")
        r = client.post("/api/jobs", json={"book": str(book), "formatter": "sidenote"})
        assert r.status_code == 400

    def test_job_invalid_language(self, client, tmp_path):
        book = tmp_path / "story.txt"
        book.write_text("x", encoding="utf-8")
        r = client.post("/api/jobs", json={"book": str(book), "language": "../../etc/en"})
        assert r.status_code == 422

    def test_unknown_job(self, client):
        assert client.get("/api/jobs/nope").status_code == 404
        assert client.post("/api/jobs/nope/cancel").status_code == 404

    def test_cancel(self, client, store):
        job_id = store.create("a.html", "b.html", AnnotationOptions())
        r = client.post(f"/api/jobs/{job_id}/cancel")
        assert r.json() == {"success": True}
        assert store.is_cancel_requested(job_id)
