"""
Unit tests for the grant-client matching pipeline.
"""

import unittest
import logging
from datetime import date

from grant_matching import analyze, analyze_portfolio, build_recommendations
from grant_matching.models import Client, Grant, GrantSource

# Configure logging for tests
logging.basicConfig(level=logging.INFO)

TODAY = date(2025, 1, 1)

# Sample data
SAMPLE_CLIENT = {
    "id": "1",
    "name": "Tech4Kids Foundation",
    "category": "Education",
    "mission": "Providing STEM education to underprivileged youth",
    "budget": 200000,
    "serviceArea": "National",
    "focusAreas": ["STEM"],
    "previousGrants": [],
}

SAMPLE_SOURCES = [
    {
        "id": "1",
        "name": "Learning Futures Fund",
        "type": "private_foundation",
        "scope": "national",
        "category": "Education",
        "grants": [
            {
                "id": "lff-1",
                "title": "STEM Access Initiative",
                "amount": "$150,000 - $250,000",
                "deadline": "2025-06-01",
                "category": "Education",
                "status": "active",
                "eligibility": "Nonprofit STEM organizations",
                "focusAreas": ["STEM", "Education"],
            }
        ],
    },
    {
        "id": "2",
        "name": "Department of Energy",
        "type": "government",
        "category": "Clean Energy",
        "grants": [
            {
                "id": "doe-1",
                "title": "Solar Energy Research Program",
                "amount": "$1,000,000 - $5,000,000",
                "deadline": "2025-02-15",
                "category": "Research",
                "status": "active",
                "eligibility": "Research Institutions, Energy Companies, Universities",
                "focusAreas": ["Renewable Energy", "Climate Change", "Innovation"],
            }
        ],
    },
]


def sample_client(**overrides):
    data = dict(SAMPLE_CLIENT)
    data.update(overrides)
    return Client.model_validate(data)


def sample_sources():
    return [GrantSource.model_validate(source) for source in SAMPLE_SOURCES]


class TestWireFormat(unittest.TestCase):
    """Test that dashboard payloads are accepted."""

    def test_camel_case_client(self):
        client = Client.model_validate({
            "name": "Community Health Alliance",
            "location": "Local",
            "targetPopulation": ["Seniors"],
            "previousGrants": ["State Health Dept - $300,000"],
            "operatingYears": "12",
            "budget": "$1,200,000",
        })
        self.assertEqual(client.service_area, "Local")
        self.assertEqual(client.budget, 1200000)
        self.assertEqual(client.operating_years, 12)
        self.assertEqual(client.target_population, ["Seniors"])

    def test_malformed_fields_degrade(self):
        client = Client.model_validate({"name": "X", "budget": "unknown", "focusAreas": None})
        self.assertIsNone(client.budget)
        self.assertEqual(client.focus_areas, [])

        grant = Grant.model_validate({"title": "Y", "deadline": "rolling", "amount": 250000})
        self.assertIsNone(grant.deadline)
        self.assertEqual(grant.amount, "$250,000")

    def test_non_finite_numbers_degrade(self):
        client = Client.model_validate({"name": "X", "operatingYears": float("inf"), "budget": "nan"})
        self.assertIsNone(client.operating_years)
        self.assertIsNone(client.budget)

        grant = Grant.model_validate({"title": "Y", "amount": float("inf")})
        self.assertIsNone(grant.amount)

    def test_serializes_camel_case(self):
        result = analyze(sample_client(), sample_sources(), today=TODAY)
        payload = result.model_dump(by_alias=True)
        self.assertIn("matchScore", payload["matches"][0])
        self.assertIn("clientStrengths", payload["analysis"])
        self.assertNotIn("highlights", payload["matches"][0]["matchScore"])


class TestAnalyze(unittest.TestCase):
    """Test end-to-end matching with sample data."""

    def test_qualifying_matches(self):
        result = analyze(sample_client(), sample_sources(), today=TODAY)
        self.assertEqual(len(result.matches), 1)

        match = result.matches[0]
        self.assertEqual(match.grant.title, "STEM Access Initiative")
        self.assertEqual(match.match_score.total, 66)
        self.assertEqual(match.match_label, "Good")
        self.assertEqual(len(match.timeline), 5)
        self.assertEqual(match.timeline[-1].due, "151 days")
        self.assertEqual(len(match.action_steps), 5)
        self.assertGreaterEqual(len(match.match_reasons), 3)

    def test_threshold_override_and_sorting(self):
        result = analyze(sample_client(), sample_sources(), qualification_threshold=0, today=TODAY)
        totals = [m.match_score.total for m in result.matches]
        self.assertEqual(len(totals), 2)
        self.assertEqual(totals, sorted(totals, reverse=True))
        self.assertEqual(totals[-1], 18)

    def test_aggregate_analysis(self):
        analysis = analyze(sample_client(), sample_sources(), today=TODAY).analysis
        self.assertEqual(analysis.client_strengths, ["Eligible for 1 funding opportunity"])
        self.assertIn("Consider expanding program areas to access more funding opportunities", analysis.improvement_areas)
        self.assertIn("Build grant writing capacity and track record", analysis.improvement_areas)
        self.assertEqual(analysis.match_factors, [
            "Strong presence in Education funding space",
            "Well-positioned for major grants",
            "Matches concentrated in private foundation funders",
        ])
        self.assertIn("qualifies for 1 of 2", analysis.summary)
        self.assertEqual(len(analysis.upcoming_deadlines), 1)
        self.assertEqual(analysis.upcoming_deadlines[0].days_remaining, 151)

    def test_established_client_strengths(self):
        client = sample_client(
            budget=250000,
            previousGrants=["NSF Education Grant - $250,000", "Google.org Tech Initiative - $150,000"],
            operatingYears=8,
            targetPopulation=["Youth"],
        )
        analysis = analyze(client, sample_sources(), today=TODAY).analysis
        self.assertIn("Excellent alignment with a high-value opportunity", analysis.client_strengths)
        self.assertIn("Strong track record of successful grant acquisition", analysis.client_strengths)

    def test_empty_sources(self):
        result = analyze(sample_client(), [], today=TODAY)
        self.assertEqual(result.matches, [])
        self.assertEqual(result.analysis.client_strengths, ["No data available"])
        self.assertEqual(result.analysis.improvement_areas, ["No data available"])
        self.assertEqual(result.analysis.summary, "No data available")

    def test_missing_client_and_grantless_sources(self):
        self.assertEqual(analyze(None, sample_sources()).matches, [])
        result = analyze(sample_client(), [GrantSource(name="Empty fund")])
        self.assertEqual(result.matches, [])
        self.assertTrue(result.analysis.client_strengths)
        self.assertTrue(result.analysis.improvement_areas)

    def test_no_qualifying_matches(self):
        result = analyze(sample_client(), sample_sources(), qualification_threshold=100, today=TODAY)
        self.assertEqual(result.matches, [])
        self.assertIn("None of the 2 grant opportunities", result.analysis.summary)
        self.assertTrue(result.analysis.client_strengths)
        self.assertTrue(result.analysis.improvement_areas)
        self.assertTrue(result.analysis.match_factors)

    def test_unrelated_client_still_gets_guidance(self):
        arts = Client(name="Arts for All Initiative", category="Arts & Culture", budget=50000, previous_grants=["City Arts Council"])
        result = analyze(arts, [GrantSource.model_validate(SAMPLE_SOURCES[1])], today=TODAY)
        self.assertEqual(result.matches, [])
        self.assertEqual(result.analysis.match_factors, ["No grant opportunities met the qualification score"])
        self.assertTrue(result.analysis.client_strengths)
        self.assertTrue(result.analysis.improvement_areas)


class TestPortfolio(unittest.TestCase):

    def test_clients_sorted_by_best_score(self):
        weak = Client(name="Arts for All Initiative", category="Arts & Culture", service_area="local")
        results = analyze_portfolio([weak, sample_client()], sample_sources(), today=TODAY)
        self.assertEqual([r.client_name for r in results], ["Tech4Kids Foundation", "Arts for All Initiative"])
        self.assertEqual(results[0].best_score, 66)
        self.assertEqual(results[1].best_score, 0)
        self.assertEqual(results[1].result.matches, [])

    def test_empty_portfolio(self):
        self.assertEqual(analyze_portfolio([], sample_sources()), [])


class TestRecommendations(unittest.TestCase):

    def test_grouping(self):
        client = sample_client(
            budget=250000,
            previousGrants=["NSF Education Grant - $250,000"],
            operatingYears=8,
            targetPopulation=["Youth"],
        )
        result = analyze(client, sample_sources(), qualification_threshold=0, today=TODAY)
        recommendations = build_recommendations(result.matches, today=TODAY)

        self.assertEqual([m.grant.title for m in recommendations.priority], ["STEM Access Initiative"])
        self.assertEqual([m.grant.title for m in recommendations.time_sensitive], ["Solar Energy Research Program"])
        self.assertEqual([m.grant.title for m in recommendations.strategic], ["Solar Energy Research Program"])
        self.assertEqual(recommendations.total_potential_funding, 5250000)

    def test_empty(self):
        recommendations = build_recommendations([])
        self.assertEqual(recommendations.priority, [])
        self.assertEqual(recommendations.total_potential_funding, 0)


if __name__ == "__main__":
    unittest.main()
