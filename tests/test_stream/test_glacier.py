import pytest

from hydrodash.common import Weather
from hydrodash.config import SystemConfig
from hydrodash.stream import NOT_READY, UNCHANGED, EmissionSkipped, GlacierMelt, GlacierReading, ids
from hydrodash.testing import make_ctx


def make_glacier(**kwargs) -> GlacierMelt:
    kwargs.setdefault("melt_coefficients", SystemConfig().melt_coefficients)
    return GlacierMelt(ids.GLACIER, **kwargs)


class TestGlacierInit:
    def test_water_loss_factor_must_be_fraction(self):
        with pytest.raises(ValueError, match="water_loss_factor must be between 0.0 and 1.0"):
            make_glacier(water_loss_factor=1.5)

    def test_inputs_are_weather_and_glacier_input(self):
        assert make_glacier().inputs == (ids.WEATHER, ids.GLACIER_INPUT)


class TestMelt:
    @pytest.mark.parametrize(
        "weather, coefficient",
        [
            (Weather.SUNNY, 0.0001),
            (Weather.CLOUDY, 0.00005),
            (Weather.RAINY, 0.00015),
            (Weather.STORMY, 0.0002),
        ],
    )
    def test_melt_rate_is_volume_times_weather_coefficient(self, weather, coefficient):
        reading = make_glacier().melt(1_000_000.0, weather)

        assert reading.melt_rate == pytest.approx(1_000_000.0 * coefficient)
        assert reading.volume == pytest.approx(1_000_000.0 - reading.melt_rate)

    def test_water_flow_applies_loss_factor(self):
        reading = make_glacier(water_loss_factor=0.95).melt(1000.0, Weather.SUNNY)

        assert reading.water_flow == pytest.approx(0.1 * 0.95)

    def test_volume_never_negative(self):
        glacier = make_glacier(melt_coefficients={w: 2.0 for w in Weather})

        reading = glacier.melt(100.0, Weather.STORMY)

        assert reading.volume == 0.0


class TestGlacierUpdate:
    def test_emits_reading_from_glacier_input(self):
        glacier = make_glacier()
        ctx = make_ctx(
            values={ids.WEATHER: Weather.SUNNY, ids.GLACIER_INPUT: 1000.0},
            emitted={ids.GLACIER_INPUT},
        )

        glacier.update(ctx)

        assert glacier.emitted_at(ctx.tick.index)
        assert isinstance(glacier.value, GlacierReading)
        assert glacier.value.melt_rate == pytest.approx(0.1)
        assert glacier.value.water_flow == pytest.approx(0.095)
        assert glacier.volume == pytest.approx(999.9)

    def test_carries_volume_forward_between_ticks(self):
        glacier = make_glacier()
        glacier.update(
            make_ctx(
                values={ids.WEATHER: Weather.SUNNY, ids.GLACIER_INPUT: 1000.0},
                emitted={ids.GLACIER_INPUT},
                index=1,
            )
        )
        glacier.update(make_ctx(values={ids.WEATHER: Weather.SUNNY, ids.GLACIER_INPUT: 1000.0}, index=2))

        assert glacier.volume == pytest.approx(1000.0 * (1 - 0.0001) ** 2)

    def test_skips_without_volume(self):
        glacier = make_glacier()
        ctx = make_ctx(values={ids.WEATHER: Weather.SUNNY})

        glacier.update(ctx)

        assert not glacier.has_value
        assert glacier.events_of_type(EmissionSkipped)[0].reason == NOT_READY

    def test_skips_duplicate_reading(self):
        glacier = make_glacier()
        values = {ids.WEATHER: Weather.SUNNY, ids.GLACIER_INPUT: 0.0}

        glacier.update(make_ctx(values=values, emitted={ids.GLACIER_INPUT}, index=1))
        glacier.update(make_ctx(values=values, index=2))

        assert glacier.emitted_at(1)
        assert not glacier.emitted_at(2)
        assert glacier.events_at(2) == [EmissionSkipped(reason=UNCHANGED, t=2)]

    def test_reset_forgets_volume(self):
        glacier = make_glacier()
        glacier.update(
            make_ctx(values={ids.WEATHER: Weather.SUNNY, ids.GLACIER_INPUT: 10.0}, emitted={ids.GLACIER_INPUT})
        )

        glacier.reset()

        assert glacier.volume is None
        assert not glacier.has_value
        assert len(glacier.events) == 0
