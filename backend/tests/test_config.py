"""
Blog API — Settings Tests
===========================
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.config import Settings

GOOD_SECRET = "x" * 32


class TestSettings:
    def test_secret_is_not_in_repr(self):
        settings = Settings(jwt_secret_key="super-secret-value-that-nobody-sees")
        assert "super-secret-value" not in repr(settings)

    def test_algorithm_normalized(self):
        assert Settings(jwt_algorithm="hs512").jwt_algorithm == "HS512"

    @pytest.mark.parametrize("algorithm", ["none", "RS256", "HS1"])
    def test_non_hmac_algorithm_rejected(self, algorithm):
        with pytest.raises(PydanticValidationError):
            Settings(jwt_algorithm=algorithm)

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(PydanticValidationError):
            Settings(bcrypt_rounds=3)
        with pytest.raises(PydanticValidationError):
            Settings(bcrypt_rounds=17)

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_is_sqlite(self):
        assert Settings(database_url="sqlite+aiosqlite://").is_sqlite
        assert not Settings(database_url="postgresql+asyncpg://u:p@h/db").is_sqlite


class TestStartupValidation:
    def test_valid(self):
        Settings(jwt_secret_key=GOOD_SECRET).validate_required_for_production()

    def test_missing_secret(self):
        with pytest.raises(ValueError, match="JWT_SECRET_KEY is not set"):
            Settings(jwt_secret_key="").validate_required_for_production()

    def test_short_secret(self):
        with pytest.raises(ValueError, match="at least 32 characters"):
            Settings(jwt_secret_key="short").validate_required_for_production()

    def test_default_page_size_above_max(self):
        settings = Settings(jwt_secret_key=GOOD_SECRET, default_page_size=50, max_page_size=20)
        with pytest.raises(ValueError, match="DEFAULT_PAGE_SIZE"):
            settings.validate_required_for_production()
