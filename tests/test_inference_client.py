import unittest

import requests

from cropsense.config import Settings
from cropsense.inference_client import (
    InferenceClient,
    InferenceUnavailableError,
    MalformedInferenceResponse,
)


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text="ok", bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self._bad_json = bad_json
        # mimic requests.Response.elapsed
        self.elapsed = type("Elapsed", (), {"total_seconds": lambda self: 0.123})()

    def json(self):
        if self._bad_json:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def _client(session):
    return InferenceClient(Settings(inference_base_url="http://model.local/"), session=session)


class TestInferenceClient(unittest.TestCase):
    def test_predict_success_posts_contract_payload(self):
        session = FakeSession(DummyResponse(200, {"predictions": [21.5, 64.0], "confidence": 0.91, "status": "ok"}))
        resp = _client(session).predict("/predict/clima", [1.0] * 48, min_predictions=2)

        self.assertEqual(resp.predictions, [21.5, 64.0])
        self.assertEqual(resp.confidence, 0.91)
        call = session.calls[0]
        self.assertEqual(call["url"], "http://model.local/predict/clima")
        self.assertEqual(len(call["json"]["inputs"]), 48)
        self.assertEqual(call["json"]["parameters"], {"return_confidence": True})
        self.assertEqual(call["timeout"], 15.0)

    def test_timeout_maps_to_unavailable(self):
        session = FakeSession(exc=requests.exceptions.Timeout("slow"))
        with self.assertRaises(InferenceUnavailableError):
            _client(session).predict("/predict/suelo", [0.0] * 96)
        self.assertEqual(len(session.calls), 1)

    def test_connection_error_maps_to_unavailable(self):
        session = FakeSession(exc=requests.exceptions.ConnectionError("down"))
        with self.assertRaises(InferenceUnavailableError):
            _client(session).predict("/predict/suelo", [0.0] * 96)

    def test_non_2xx_is_unavailable(self):
        session = FakeSession(DummyResponse(503, None, text="maintenance"))
        with self.assertRaises(InferenceUnavailableError):
            _client(session).predict("/predict/clima", [0.0] * 48)

    def test_non_json_is_malformed(self):
        session = FakeSession(DummyResponse(200, None, bad_json=True))
        with self.assertRaises(MalformedInferenceResponse):
            _client(session).predict("/predict/clima", [0.0] * 48)

    def test_short_prediction_vector_is_malformed(self):
        session = FakeSession(DummyResponse(200, {"predictions": [7.0, 45.0], "confidence": 0.9}))
        with self.assertRaises(MalformedInferenceResponse):
            _client(session).predict("/predict/suelo", [0.0] * 96, min_predictions=4)

    def test_missing_predictions_is_malformed(self):
        session = FakeSession(DummyResponse(200, {"status": "error"}))
        with self.assertRaises(MalformedInferenceResponse):
            _client(session).predict("/predict/clima", [0.0] * 48, min_predictions=2)

    def test_non_numeric_prediction_is_malformed(self):
        session = FakeSession(DummyResponse(200, {"predictions": ["hot", 60]}))
        with self.assertRaises(MalformedInferenceResponse):
            _client(session).predict("/predict/clima", [0.0] * 48, min_predictions=2)

    def test_missing_confidence_is_none(self):
        session = FakeSession(DummyResponse(200, {"predictions": [1, 2, 3, 4]}))
        resp = _client(session).predict("/predict/suelo", [0.0] * 96, min_predictions=4)
        self.assertIsNone(resp.confidence)
        self.assertEqual(resp.predictions, [1.0, 2.0, 3.0, 4.0])


if __name__ == "__main__":
    unittest.main()
