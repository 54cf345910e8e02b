from unittest.mock import patch

import pytest

from waterdesk.staging.factory import get_staging_area
from waterdesk.staging.local import LocalStagingArea
from waterdesk.staging.memory import MemoryStagingArea


class TestGetStagingArea:
    def test_memory(self):
        with patch("waterdesk.staging.factory.settings") as mock_settings:
            mock_settings.staging_backend = "memory"
            assert isinstance(get_staging_area(), MemoryStagingArea)

    def test_local(self, tmp_path):
        with patch("waterdesk.staging.factory.settings") as mock_settings:
            mock_settings.staging_backend = "local"
            mock_settings.staging_local_path = str(tmp_path)
            area = get_staging_area()
        assert isinstance(area, LocalStagingArea)
        assert area.base_dir == tmp_path

    def test_unknown_backend(self):
        with patch("waterdesk.staging.factory.settings") as mock_settings:
            mock_settings.staging_backend = "redis"
            with pytest.raises(ValueError, match="Unsupported staging backend"):
                get_staging_area()
