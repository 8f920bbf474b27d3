import unittest

from dublinbikes.main import app


class TestMain(unittest.TestCase):
    def test_app_metadata(self):
        self.assertEqual(app.title, "Dublin Bikes API")
        paths = app.openapi()["paths"]
        self.assertIn("/ping", paths)
        self.assertIn("/api/{version}/stations", paths)


if __name__ == "__main__":
    unittest.main()
