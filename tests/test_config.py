import pytest
from pydantic import ValidationError

from config import MIN_BCRYPT_ROUNDS, Settings


def test_defaults():
    s = Settings(app_env="dev")
    assert s.bcrypt_rounds == 12
    assert s.access_token_expire_minutes == 60
    assert s.refresh_token_expire_days == 7
    assert s.http_max_retries == 0


def test_low_bcrypt_cost_rejected_outside_tests():
    with pytest.raises(ValidationError):
        Settings(app_env="prod", bcrypt_rounds=4)
    assert Settings(app_env="prod", bcrypt_rounds=MIN_BCRYPT_ROUNDS).bcrypt_rounds == 10


def test_low_bcrypt_cost_allowed_in_test_env():
    assert Settings(app_env="test", bcrypt_rounds=4).bcrypt_rounds == 4


def test_bcrypt_cost_upper_bound():
    with pytest.raises(ValidationError):
        Settings(app_env="test", bcrypt_rounds=32)
