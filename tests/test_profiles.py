import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_review.core.profiles import UnknownProfileError, get_profile, load_profiles  # noqa: E402


class AnalysisProfileTests(unittest.TestCase):
    def test_loader_reads_both_profiles(self):
        profiles = load_profiles()

        self.assertEqual(set(profiles), {"career_review", "ats_review"})
        self.assertIs(load_profiles(), profiles)

    def test_career_review_fields(self):
        profile = get_profile("career_review")

        self.assertEqual(profile.list_fields, ("keyStrengths", "improvementRecommendations", "idealHeadlines"))
        self.assertIn("detectedLanguage", profile.system_prompt)
        self.assertIn("parse", profile.fallback_summary.lower())

    def test_ats_review_fields(self):
        profile = get_profile("ats_review")

        self.assertEqual(profile.list_fields, ("keywordRecommendations", "structureTips", "industryFit", "warnings"))
        self.assertIn("parse", profile.fallback_summary.lower())

    def test_default_profile_follows_provider(self):
        self.assertEqual(get_profile(provider="gemini").name, "career_review")
        self.assertEqual(get_profile(provider="openai").name, "ats_review")
        self.assertEqual(get_profile(provider="groq").name, "ats_review")
        self.assertEqual(get_profile(provider="claude").name, "ats_review")
        self.assertEqual(get_profile().name, "career_review")
        self.assertEqual(get_profile("  ", provider="openai").name, "ats_review")

    def test_explicit_name_wins_over_provider(self):
        self.assertEqual(get_profile("career_review", provider="openai").name, "career_review")

    def test_unknown_profile(self):
        with self.assertRaises(UnknownProfileError):
            get_profile("executive_review")


if __name__ == "__main__":
    unittest.main()
