from calmwalk.core.constants import HIGH_NOISE_DB

# Upper bounds (exclusive) for each description band, in dB
NOISE_BANDS = [
    (30.0, "Very Quiet"),
    (40.0, "Quiet"),
    (50.0, "Moderate"),
    (60.0, "Loud"),
    (70.0, "Very Loud"),
]


def describe_noise(noise_level: float) -> str:
    """
    Convert a noise level in dB to a human-readable description.
    Example: 45.0 -> 'Moderate'
    """
    for upper, label in NOISE_BANDS:
        if noise_level < upper:
            return label
    return "Extremely Loud"


def is_stressful_noise(noise_level: float) -> bool:
    return noise_level > HIGH_NOISE_DB
