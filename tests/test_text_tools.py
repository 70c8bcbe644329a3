import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from provider_stubs import JsonProvider, make_config  # noqa: E402
from resume_review.ai.errors import TransportError  # noqa: E402
from resume_review.schemas.analysis import ContactInfo  # noqa: E402
from resume_review.services.text_tools import (  # noqa: E402
    extract_contact_info,
    extract_requirements,
    rewrite_text,
    split_requirements,
    translate_text,
)


def gemini_text(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def sent_prompt(provider):
    return provider.sent_json()["contents"][0]["parts"][0]["text"]


class SplitRequirementsTests(unittest.TestCase):
    def test_splits_commas_and_lines_and_dedupes(self):
        raw = "Python, FastAPI,\n- PostgreSQL\n* python\n• Docker, , Kubernetes "

        self.assertEqual(split_requirements(raw), ["Python", "FastAPI", "PostgreSQL", "Docker", "Kubernetes"])

    def test_empty_text(self):
        self.assertEqual(split_requirements(""), [])


class TextToolsTests(unittest.IsolatedAsyncioTestCase):
    async def test_translate_names_target_language(self):
        provider = JsonProvider(gemini_text("Ingeniero de software"))
        config = make_config(json_output=False)
        async with provider.client() as client:
            text = await translate_text("Software engineer", config, "es", client=client)

        self.assertEqual(text, "Ingeniero de software")
        self.assertIn("Translate the following text to Spanish.", sent_prompt(provider))
        self.assertIn('"Software engineer"', sent_prompt(provider))

    async def test_translate_unknown_language_code_is_passed_through(self):
        provider = JsonProvider(gemini_text("..."))
        async with provider.client() as client:
            await translate_text("Hello", make_config(json_output=False), "pt-BR", client=client)

        self.assertIn("to pt-BR.", sent_prompt(provider))

    async def test_rewrite(self):
        provider = JsonProvider(gemini_text("Led migration of 40 services to Kubernetes."))
        async with provider.client() as client:
            text = await rewrite_text("did k8s stuff", make_config(json_output=False), client=client)

        self.assertEqual(text, "Led migration of 40 services to Kubernetes.")
        self.assertIn("more professional", sent_prompt(provider))

    async def test_rewrite_propagates_transport_errors(self):
        provider = JsonProvider({"error": {"message": "overloaded"}}, status_code=503)
        async with provider.client() as client:
            with self.assertRaises(TransportError):
                await rewrite_text("text", make_config(json_output=False), client=client)

    async def test_extract_requirements(self):
        provider = JsonProvider(gemini_text("Python, SQL, Python, REST APIs"))
        async with provider.client() as client:
            requirements = await extract_requirements("We need a Python dev", make_config(), client=client)

        self.assertEqual(requirements, ["Python", "SQL", "REST APIs"])

    async def test_contact_info(self):
        provider = JsonProvider(
            gemini_text('{"name": "Jane Doe", "phone": "", "email": "jane@example.com"}')
        )
        long_resume = "Jane Doe\njane@example.com\n" + "x" * 5000
        async with provider.client() as client:
            info = await extract_contact_info(long_resume, make_config(json_output=False), client=client)

        self.assertEqual(info, ContactInfo(name="Jane Doe", phone="N/A", email="jane@example.com"))
        body = provider.sent_json()
        self.assertEqual(body["generationConfig"]["responseMimeType"], "application/json")
        self.assertNotIn("x" * 2001, body["contents"][0]["parts"][0]["text"])

    async def test_contact_info_degrades_on_bad_output(self):
        for reply in (gemini_text("no contacts here"), gemini_text("[1, 2]"), {"error": {"message": "boom"}}):
            with self.subTest(reply=reply):
                provider = JsonProvider(reply)
                async with provider.client() as client:
                    info = await extract_contact_info("resume", make_config(), client=client)
                self.assertEqual(info, ContactInfo())


if __name__ == "__main__":
    unittest.main()
