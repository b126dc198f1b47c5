import json
import unittest

from app.ai.validator import validate_analysis
from app.core.errors import ValidationError
from app.schemas.analysis import AnalysisResult
from fakes import analysis_payload


class ResponseValidatorTests(unittest.TestCase):
    def test_valid_payload_produces_result(self):
        result = validate_analysis(json.dumps(analysis_payload()))
        self.assertIsInstance(result, AnalysisResult)
        self.assertEqual(result.candidate_name, "Jane Doe")
        self.assertEqual(result.overall_score, 84)
        self.assertEqual(result.skills_analysis.score, 90)
        self.assertEqual(result.strengths, ["Go", "Kubernetes migration"])

    def test_validation_is_idempotent(self):
        first = validate_analysis(json.dumps(analysis_payload()))
        second = validate_analysis(first.model_dump_json(by_alias=True))
        self.assertEqual(first, second)

    def test_extra_fields_pass_through(self):
        payload = analysis_payload(confidence="high")
        payload["skillsAnalysis"]["matched"] = ["Go"]
        result = validate_analysis(json.dumps(payload))
        dumped = result.model_dump(by_alias=True)
        self.assertEqual(dumped["confidence"], "high")
        self.assertEqual(dumped["skillsAnalysis"]["matched"], ["Go"])

    def test_code_fenced_json_is_accepted(self):
        raw = "```json\n" + json.dumps(analysis_payload()) + "\n```"
        self.assertEqual(validate_analysis(raw).candidate_name, "Jane Doe")

    def test_unparseable_payload_rejected(self):
        for raw in ("I am sorry, I cannot help with that.", "", "[1, 2, 3]", "{\"candidateName\": "):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    validate_analysis(raw)

    def test_missing_or_blank_candidate_name_rejected(self):
        payload = analysis_payload()
        del payload["candidateName"]
        with self.assertRaises(ValidationError):
            validate_analysis(json.dumps(payload))
        with self.assertRaises(ValidationError):
            validate_analysis(json.dumps(analysis_payload(candidateName="   ")))

    def test_overall_score_must_be_a_number(self):
        for bad in ("88", None, True, [88]):
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    validate_analysis(json.dumps(analysis_payload(overallScore=bad)))

    def test_section_requires_score_and_details(self):
        for section in ("skillsAnalysis", "experienceAnalysis", "educationAnalysis"):
            for missing in ("score", "details"):
                payload = analysis_payload()
                del payload[section][missing]
                with self.subTest(section=section, missing=missing):
                    with self.assertRaises(ValidationError):
                        validate_analysis(json.dumps(payload))

    def test_section_score_string_not_coerced(self):
        payload = analysis_payload()
        payload["educationAnalysis"]["score"] = "60"
        with self.assertRaises(ValidationError):
            validate_analysis(json.dumps(payload))

    def test_missing_section_rejected(self):
        payload = analysis_payload()
        del payload["experienceAnalysis"]
        with self.assertRaises(ValidationError):
            validate_analysis(json.dumps(payload))

    def test_out_of_range_scores_are_clamped(self):
        payload = analysis_payload(overallScore=130)
        payload["skillsAnalysis"]["score"] = -5
        result = validate_analysis(json.dumps(payload))
        self.assertEqual(result.overall_score, 100)
        self.assertEqual(result.skills_analysis.score, 0)

    def test_optional_narrative_fields_default_to_empty(self):
        payload = analysis_payload()
        for key in ("summary", "strengths", "weaknesses"):
            del payload[key]
        result = validate_analysis(json.dumps(payload))
        self.assertEqual(result.summary, "")
        self.assertEqual(result.strengths, [])
        self.assertEqual(result.weaknesses, [])

    def test_result_is_immutable(self):
        result = validate_analysis(json.dumps(analysis_payload()))
        with self.assertRaises(Exception):
            result.overall_score = 10


if __name__ == "__main__":
    unittest.main()
