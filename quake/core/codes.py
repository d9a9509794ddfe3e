"""JMA code tables - Pure lookups.

Maps the codes and words found in JMA XML onto the values used by the
normalized (EPSP) event records.
"""

# Seismic intensity (<Int>, <MaxInt>, <ForecastInt>) -> EPSP scale
INTENSITY_SCALES: dict[str, int] = {
    "1": 10,
    "2": 20,
    "3": 30,
    "4": 40,
    "5-": 45,
    "5+": 50,
    "6-": 55,
    "6+": 60,
    "7": 70,
}

# City reported as "震度５弱以上未入電" (5- or more, not yet received)
SCALE_UNRECEIVED_5_LOWER = 46

# EEW "<To>over</To>" (upper bound open)
SCALE_OVER = 99

SCALE_UNKNOWN = -1

# Quake issue type by <Control><Title>
QUAKE_ISSUE_TYPES: dict[str, str] = {
    "震度速報": "ScalePrompt",
    "震源に関する情報": "Destination",
    "震源・震度に関する情報": "DetailScale",
}

# <Head><Title> of VXSE53 for earthquakes far from Japan
FOREIGN_HEAD_TITLE = "遠地地震に関する情報"

# Issue types that carry a hypocenter
QUAKE_TYPES_WITH_HYPOCENTER = frozenset({"Destination", "DetailScale", "Foreign"})

# <ForecastComment> codes -> domesticTsunami
DOMESTIC_TSUNAMI_CODES: dict[str, str] = {
    "0211": "Warning",
    "0212": "NonEffective",
    "0213": "NonEffective",
    "0214": "Checking",
    "0215": "None",
    "0216": "Checking",
    "0217": "Checking",
}

# <ForecastComment> codes -> foreignTsunami
FOREIGN_TSUNAMI_CODES: dict[str, str] = {
    "0221": "WarningPacificWide",
    "0222": "WarningPacific",
    "0223": "WarningPacific",
    "0224": "WarningIndianWide",
    "0225": "WarningIndian",
    "0226": "WarningNearby",
    "0227": "NonEffectiveNearby",
    "0228": "Potential",
    "0229": "Potential",
}

# Tsunami <Category><Kind><Code> -> grade
TSUNAMI_GRADES: dict[str, str] = {
    "52": "MajorWarning",
    "53": "MajorWarning",
    "51": "Warning",
    "62": "Watch",
    "71": "Unknown",
    "72": "Unknown",
    "73": "Unknown",
}

# Kind codes meaning "no tsunami" / "lifted"; such areas are not served
TSUNAMI_INACTIVE_CODES = frozenset({"00", "50", "60"})

# <FirstHeight><Condition> for immediate arrival
TSUNAMI_IMMEDIATE_CONDITION = "ただちに津波来襲と予測"

INFO_TYPE_CANCEL = "取消"
INFO_TYPE_CORRECTION = "訂正"
STATUS_NORMAL = "通常"
