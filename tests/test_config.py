import unittest
from pathlib import Path

from unidirectory.config import DEFAULT_API_URL, ConfigError, Settings, build_service, load_settings
from unidirectory.remote import RemoteUniversityService
from unidirectory.service import LocalUniversityService
from unidirectory.storage import default_data_dir


class TestConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        s = load_settings({})
        self.assertEqual(s.backend, "local")
        self.assertEqual(s.api_url, DEFAULT_API_URL)
        self.assertEqual(s.data_dir, default_data_dir())
        self.assertEqual(s.latency, 0.0)
        self.assertEqual(s.timeout, 30.0)

    def test_environment_values(self) -> None:
        s = load_settings(
            {
                "UNIDIRECTORY_BACKEND": " Remote ",
                "UNIDIRECTORY_API_URL": "https://api.example/v1",
                "UNIDIRECTORY_DATA_DIR": "/tmp/unidir",
                "UNIDIRECTORY_LATENCY": "0.15",
                "UNIDIRECTORY_TIMEOUT": "5",
            }
        )
        self.assertEqual(s.backend, "remote")
        self.assertEqual(s.api_url, "https://api.example/v1")
        self.assertEqual(s.data_dir, Path("/tmp/unidir"))
        self.assertEqual(s.latency, 0.15)
        self.assertEqual(s.timeout, 5.0)

    def test_invalid_values(self) -> None:
        with self.assertRaises(ConfigError):
            load_settings({"UNIDIRECTORY_BACKEND": "sqlite"})
        with self.assertRaises(ConfigError):
            load_settings({"UNIDIRECTORY_LATENCY": "fast"})
        with self.assertRaises(ConfigError):
            load_settings({"UNIDIRECTORY_TIMEOUT": "-1"})

    def test_overrides_skip_none(self) -> None:
        s = Settings().with_overrides(backend="memory", api_url=None, data_dir="/tmp/x")
        self.assertEqual(s.backend, "memory")
        self.assertEqual(s.api_url, DEFAULT_API_URL)
        self.assertEqual(s.data_dir, Path("/tmp/x"))
        with self.assertRaises(ConfigError):
            Settings().with_overrides(backend="nope")

    def test_build_service(self) -> None:
        self.assertIsInstance(build_service(Settings(backend="local")), LocalUniversityService)
        self.assertIsInstance(build_service(Settings(backend="memory")), LocalUniversityService)
        remote = build_service(Settings(backend="remote", api_url="https://api.example/"))
        self.assertIsInstance(remote, RemoteUniversityService)
        self.assertEqual(remote.base_url, "https://api.example")


if __name__ == "__main__":
    unittest.main()
