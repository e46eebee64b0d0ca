import pytest

from mortgage_sim.config import ClampOrder, Settings, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings == Settings()
    assert settings.clamp_order is ClampOrder.REGULAR_FIRST
    assert not settings.is_production
    assert settings.log_file is None


def test_environment_values():
    settings = load_settings(
        {
            "MORTGAGE_SIM_DATABASE_URL": "sqlite://",
            "MORTGAGE_SIM_DAY_BASIS": "360",
            "MORTGAGE_SIM_CLAMP_ORDER": "Extra_First",
            "MORTGAGE_SIM_MAX_MONTHS": "480",
            "MORTGAGE_SIM_ENV": "production",
            "MORTGAGE_SIM_LOG_LEVEL": "debug",
            "MORTGAGE_SIM_LOG_FILE": "/var/log/mortgage-sim.log",
        }
    )
    assert settings.database_url == "sqlite://"
    assert settings.day_basis == 360
    assert settings.clamp_order is ClampOrder.EXTRA_FIRST
    assert settings.max_months == 480
    assert settings.is_production
    assert settings.log_level == "DEBUG"
    assert settings.log_file == "/var/log/mortgage-sim.log"


@pytest.mark.parametrize(
    "env",
    [
        {"MORTGAGE_SIM_CLAMP_ORDER": "largest_first"},
        {"MORTGAGE_SIM_DAY_BASIS": "0"},
        {"MORTGAGE_SIM_MAX_MONTHS": "many"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(ValueError):
        load_settings(env)
