import os
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from nsfeed.app import app

ENV = {"DDNS_DOMAIN": "example.com", "DDNS_SERVER": "192.0.2.53"}


@patch.dict(os.environ, ENV, clear=True)
class TestApp(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_render(self):
        # When
        response = self.client.post("/render", json={
            "lines": ["site1,bldg1,host1,192.0.2.5,note", "host2,not-an-ip"],
            "reverse": False,
        })

        # Then
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["directives"], [
            "update delete host1.example.com. a",
            "update add host1.example.com. 3600 a 192.0.2.5",
            "send",
        ])
        self.assertTrue(body["script"].startswith("server 192.0.2.53\n"))
        self.assertEqual(len(body["errors"]), 1)
        self.assertTrue(body["errors"][0].startswith("2: "))

    def test_render_invalid_body(self):
        response = self.client.post("/render", json={"lines": "host1,192.0.2.5", "remove": "maybe"})
        self.assertEqual(response.status_code, 422)

    def test_render_without_domain(self):
        with patch.dict(os.environ, {}, clear=True):
            response = self.client.post("/render", json={"lines": ["host1,192.0.2.5"]})
        self.assertEqual(response.status_code, 400)

    @patch('nsfeed.app.NsupdateClient')
    def test_apply_with_bad_domain(self, mock_client):
        response = self.client.post("/apply", json={"lines": ["host1,192.0.2.5"], "domain": "..."})

        self.assertEqual(response.status_code, 400)
        mock_client.return_value.send.assert_not_called()

    @patch('nsfeed.app.NsupdateClient')
    def test_apply_success(self, mock_client):
        mock_client.return_value.send.return_value = True

        response = self.client.post("/apply", json={"lines": ["host1,192.0.2.5"], "remove": True})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Update applied.")
        script = mock_client.return_value.send.call_args[0][0]
        self.assertNotIn("update add", script)

    @patch('nsfeed.app.NsupdateClient')
    def test_apply_failure(self, mock_client):
        mock_client.return_value.send.return_value = False

        response = self.client.post("/apply", json={"lines": ["host1,192.0.2.5"]})

        self.assertEqual(response.status_code, 502)

    @patch('nsfeed.app.NsupdateClient')
    def test_apply_nothing_to_do(self, mock_client):
        response = self.client.post("/apply", json={"lines": ["# nothing"]})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "No records to update.")
        mock_client.return_value.send.assert_not_called()


if __name__ == "__main__":
    unittest.main()
