"""
iaq.py – Indoor air quality payload.

Values are mock readings until a sensor feed is connected.
"""
from __future__ import annotations

from datetime import datetime

from .periods import iso_utc
from .schemas import IaqHumidity, IaqReading, IaqResponse, IaqVoc, IaqWeather

_EXCELLENT_TH = "ยอดเยี่ยม"
_MODERATE_TH = "ปานกลาง"


def current(now: datetime) -> IaqResponse:
    return IaqResponse(
        weather=IaqWeather(label_th="สภาพอากาศวันนี้", temperature_c=32, condition="sunny"),
        pm25=IaqReading(label_th="PM 2.5", value=7.1, unit="µg/m³", status=_EXCELLENT_TH),
        pm10=IaqReading(label_th="PM 10", value=8, unit="µg/m³", status=_EXCELLENT_TH),
        co2=IaqReading(label_th="CO₂", value=403, unit="ppm", status=_EXCELLENT_TH),
        humidity=IaqHumidity(label_th="ความชื้น", value_percent=70, status=_MODERATE_TH),
        voc=IaqVoc(label_th="สารประกอบอินทรีย์ระเหย", value_ppb=500, status=_MODERATE_TH),
        updated_at=iso_utc(now),
    )
