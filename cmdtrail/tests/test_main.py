import unittest

from cmdtrail import config
from cmdtrail.main import app, health


class AppTests(unittest.TestCase):
    def test_health_reports_configured_version(self) -> None:
        self.assertEqual(health(), {"status": "ok", "version": config.APP_VERSION})
        self.assertEqual(app.version, config.APP_VERSION)

    def test_discover_routes_are_mounted(self) -> None:
        paths = {route.path for route in app.routes}

        self.assertIn("/api/discover/commands", paths)
        self.assertIn("/api/health", paths)


if __name__ == "__main__":
    unittest.main()
