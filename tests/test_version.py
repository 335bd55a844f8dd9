import importlib.metadata
import unittest

import termplex


class VersionTests(unittest.TestCase):
    def test_version_matches_metadata(self) -> None:
        meta_version = importlib.metadata.version("termplex")
        self.assertEqual(termplex.__version__, meta_version)


if __name__ == "__main__":
    unittest.main()
