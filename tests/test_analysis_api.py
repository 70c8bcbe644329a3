import base64
import json
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi.testclient import TestClient  # noqa: E402

from provider_stubs import JsonProvider, StubProvider, gemini_frame, openai_frame, sse_body  # noqa: E402
from resume_review.core.lifespan import get_http_client  # noqa: E402
from resume_review.main import app  # noqa: E402

RESUME = "Jane Doe. Backend engineer, 8 years of Python and FastAPI, led a team of five."
PIECES = [
    '{"score": 91, "summary": "Excellent backend profile", ',
    '"keyStrengths": ["Python", "Leadership", "APIs"], "improvementRecommendations": ["Add ATS keywords"], ',
    '"idealHeadlines": ["Staff Backend Engineer"]}',
]


def parse_sse(text):
    parsed = []
    for block in text.strip().split("\n\n"):
        lines = block.split("\n")
        event = lines[0][len("event: "):]
        data = "\n".join(line[len("data: "):] for line in lines[1:])
        parsed.append((event, data))
    return parsed


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        app.dependency_overrides.clear()

    def use_provider(self, provider):
        http_client = provider.client()
        app.dependency_overrides[get_http_client] = lambda: http_client
        return provider


class HealthApiTests(ApiTestCase):
    def test_health(self):
        response = self.client.get("/v1/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"status": "healthy", "provider": "gemini", "profiles": ["ats_review", "career_review"]},
        )


class AnalysisApiTests(ApiTestCase):
    def test_analysis_returns_validated_result(self):
        stub = self.use_provider(StubProvider.streaming(sse_body(*[gemini_frame(p) for p in PIECES]), chunk_size=17))
        response = self.client.post("/v1/analysis", json={"text": RESUME})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["score"], 91)
        self.assertEqual(body["status"], "complete")
        self.assertEqual(body["sections"]["keyStrengths"], ["Python", "Leadership", "APIs"])
        self.assertEqual(len(stub.requests), 1)

    def test_analysis_with_openai_and_ats_profile(self):
        stub = self.use_provider(
            StubProvider.streaming(sse_body(*[openai_frame(p) for p in PIECES], done=True))
        )
        response = self.client.post("/v1/analysis", json={"text": RESUME, "provider": "openai"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            set(response.json()["sections"]),
            {"keywordRecommendations", "structureTips", "industryFit", "warnings"},
        )
        self.assertTrue(str(stub.requests[0].url).endswith("/chat/completions"))

    def test_analysis_fallback_is_flagged(self):
        self.use_provider(StubProvider.streaming(sse_body(gemini_frame("not json at all"))))
        response = self.client.post("/v1/analysis", json={"text": RESUME})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "fallback")
        self.assertEqual(body["score"], 0)
        self.assertIn("parse", body["summary"].lower())

    def test_analysis_provider_error_maps_to_bad_gateway(self):
        self.use_provider(StubProvider.streaming(sse_body({"error": {"message": "rate limited"}})))
        response = self.client.post("/v1/analysis", json={"text": RESUME})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "rate limited")

    def test_analysis_empty_stream_maps_to_bad_gateway(self):
        self.use_provider(StubProvider([]))
        response = self.client.post("/v1/analysis", json={"text": RESUME})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "No data received from Gemini API")

    def test_analysis_request_validation(self):
        stub = self.use_provider(StubProvider([]))
        image = base64.b64encode(b"\x89PNG fake").decode("ascii")
        cases = {
            "no input": {},
            "blank text": {"text": "   "},
            "both inputs": {"text": RESUME, "image_base64": image, "media_type": "image/png"},
            "bad media type": {"image_base64": image, "media_type": "application/pdf"},
            "bad base64": {"image_base64": "***", "media_type": "image/png"},
            "unknown profile": {"text": RESUME, "profile": "executive_review"},
            "unknown provider": {"text": RESUME, "provider": "mistral"},
        }
        for label, payload in cases.items():
            with self.subTest(case=label):
                response = self.client.post("/v1/analysis", json=payload)
                self.assertEqual(response.status_code, 422)
        self.assertEqual(stub.requests, [])

    def test_image_analysis(self):
        stub = self.use_provider(StubProvider.streaming(sse_body(*[gemini_frame(p) for p in PIECES])))
        image = b"\x89PNG\r\n\x1a\nfake-image"
        response = self.client.post(
            "/v1/analysis",
            json={"image_base64": base64.b64encode(image).decode("ascii"), "media_type": "image/png"},
        )

        self.assertEqual(response.status_code, 200)
        parts = stub.sent_json()["contents"][0]["parts"]
        self.assertEqual(base64.b64decode(parts[1]["inlineData"]["data"]), image)


class AnalysisStreamApiTests(ApiTestCase):
    def test_stream_emits_trace_chunks_result_done(self):
        self.use_provider(StubProvider.streaming(sse_body(*[gemini_frame(p) for p in PIECES]), chunk_size=5))
        response = self.client.post("/v1/analysis/stream", json={"text": RESUME})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/event-stream"))
        self.assertEqual(response.headers["cache-control"], "no-cache")

        events = parse_sse(response.text)
        names = [name for name, _ in events]
        self.assertEqual(names, ["trace", "chunk", "chunk", "chunk", "result", "done"])
        self.assertEqual([data for name, data in events if name == "chunk"], PIECES)
        result = json.loads(events[-2][1])
        self.assertEqual(result["score"], 91)
        self.assertEqual(events[-1][1], "[DONE]")

    def test_stream_reports_error_event(self):
        self.use_provider(StubProvider(status_code=500, body=b'{"error": {"message": "internal"}}'))
        response = self.client.post("/v1/analysis/stream", json={"text": RESUME})

        events = parse_sse(response.text)
        self.assertEqual([name for name, _ in events], ["trace", "error", "done"])
        error = json.loads(events[1][1])
        self.assertEqual(error, {"message": "internal", "code": "transport", "status": 502})


class AnalysisUploadApiTests(ApiTestCase):
    def test_text_upload(self):
        stub = self.use_provider(StubProvider.streaming(sse_body(*[gemini_frame(p) for p in PIECES])))
        response = self.client.post(
            "/v1/analysis/upload",
            files={"file": ("resume.txt", RESUME.encode("utf-8"), "text/plain")},
            data={"profile": "ats_review"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("warnings", response.json()["sections"])
        self.assertIn(RESUME, stub.sent_json()["contents"][0]["parts"][0]["text"])

    def test_markdown_upload_by_extension(self):
        self.use_provider(StubProvider.streaming(sse_body(*[gemini_frame(p) for p in PIECES])))
        response = self.client.post(
            "/v1/analysis/upload",
            files={"file": ("resume.md", b"# Jane Doe\nPython", "application/octet-stream")},
        )

        self.assertEqual(response.status_code, 200)

    def test_image_upload(self):
        stub = self.use_provider(StubProvider.streaming(sse_body(*[gemini_frame(p) for p in PIECES])))
        response = self.client.post(
            "/v1/analysis/upload",
            files={"file": ("resume.jpg", b"\xff\xd8\xff\xe0fake", "image/jpeg")},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(stub.sent_json()["contents"][0]["parts"][1]["inlineData"]["mimeType"], "image/jpeg")

    def test_upload_rejections(self):
        stub = self.use_provider(StubProvider([]))
        cases = [
            ("unsupported type", {"file": ("resume.pdf", b"%PDF-1.7", "application/pdf")}, {}, 415),
            ("empty file", {"file": ("resume.txt", b"", "text/plain")}, {}, 422),
            ("unknown profile", {"file": ("resume.txt", b"text", "text/plain")}, {"profile": "nope"}, 400),
        ]
        for label, files, data, expected in cases:
            with self.subTest(case=label):
                response = self.client.post("/v1/analysis/upload", files=files, data=data)
                self.assertEqual(response.status_code, expected)
        self.assertEqual(stub.requests, [])


class MatchingApiTests(ApiTestCase):
    def test_score_candidates(self):
        def reply(request):
            prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            if "Candidate Summary: Python veteran" in prompt:
                return {"candidates": [{"content": {"parts": [{"text": '{"score": 80, "rationale": "Good."}'}]}}]}
            return {"candidates": [{"content": {"parts": [{"text": "no idea"}]}}]}

        self.use_provider(JsonProvider(reply))
        response = self.client.post(
            "/v1/matching/score",
            json={
                "vacancy": {"title": "Backend Engineer", "requirements": ["Python"]},
                "candidates": [
                    {"label": "jane", "summary": "Python veteran", "strengths": ["Python"]},
                    {"summary": "Designer"},
                ],
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {
                "vacancy_title": "Backend Engineer",
                "matches": [
                    {"label": "jane", "score": 80, "rationale": "Good."},
                    {"label": "candidate-2", "score": 0, "rationale": "Matching service unavailable"},
                ],
            },
        )

    def test_candidates_are_required(self):
        response = self.client.post(
            "/v1/matching/score",
            json={"vacancy": {"title": "Backend Engineer"}, "candidates": []},
        )

        self.assertEqual(response.status_code, 422)


class TextToolsApiTests(ApiTestCase):
    def test_translate(self):
        provider = self.use_provider(JsonProvider({"candidates": [{"content": {"parts": [{"text": "Hallo"}]}}]}))
        response = self.client.post("/v1/text/translate", json={"text": "Hello", "target_lang": "de"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"text": "Hallo"})
        self.assertIn("to German.", provider.sent_json()["contents"][0]["parts"][0]["text"])

    def test_rewrite_upstream_failure(self):
        self.use_provider(JsonProvider({"error": {"message": "overloaded"}}, status_code=503))
        response = self.client.post("/v1/text/rewrite", json={"text": "did stuff"})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"], "overloaded")

    def test_extract_requirements(self):
        self.use_provider(JsonProvider({"candidates": [{"content": {"parts": [{"text": "Python, SQL, python"}]}}]}))
        response = self.client.post("/v1/vacancies/extract-requirements", json={"description": "Python dev"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"requirements": ["Python", "SQL"]})

    def test_blank_description_is_rejected(self):
        response = self.client.post("/v1/vacancies/extract-requirements", json={"description": "   "})

        self.assertEqual(response.status_code, 422)

    def test_contact_info(self):
        self.use_provider(
            JsonProvider(
                {"candidates": [{"content": {"parts": [{"text": '{"name": "Jane", "email": "j@x.io"}'}]}}]}
            )
        )
        response = self.client.post("/v1/contact-info", json={"resume_text": RESUME})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"name": "Jane", "phone": "N/A", "email": "j@x.io"})


if __name__ == "__main__":
    unittest.main()
