WATER_INPUT = "water_input"
WEATHER = "weather"
WASTEWATER_INPUT = "wastewater_input"
USER_CONSUMPTION_INPUT = "user_consumption_input"
GLACIER_INPUT = "glacier_input"

GLACIER = "glacier"
DAM = "dam"
PURIFICATION = "purification"
POWER = "power"
IRRIGATION = "irrigation"
WASTEWATER = "wastewater"
WATER_QUALITY = "water_quality"
FLOOD_RISK = "flood_risk"
USER_CONSUMPTION = "user_consumption"
DISTRIBUTION = "distribution"
