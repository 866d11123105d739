"""
Karnataka High Court & District Court calendar 2026.

Source: official High Court of Karnataka Calendar 2026. Dates marked ``*``
depend on moon sighting and may shift by a day.
"""
from datetime import date

VACATIONS_2026 = [
    ("Summer Vacation", date(2026, 5, 4), date(2026, 5, 30)),
    ("Dasara Vacation", date(2026, 10, 19), date(2026, 10, 24)),
    ("Winter Vacation", date(2026, 12, 21), date(2026, 12, 31)),
]

GENERAL_HOLIDAYS_2026 = {
    # January
    date(2026, 1, 1): "New Year's Day",
    date(2026, 1, 2): "Holiday (HC Calendar)",
    date(2026, 1, 15): "Uttarayana Punyakala/Sankranthi Festival",
    date(2026, 1, 16): "Holiday (HC Calendar)",
    date(2026, 1, 26): "Republic Day",
    # March
    date(2026, 3, 19): "Chandramana Ugadi",
    date(2026, 3, 20): "Holiday (HC Calendar)",
    date(2026, 3, 21): "Khutub-E-Ramzan*",
    date(2026, 3, 30): "Holiday (HC Calendar)",
    date(2026, 3, 31): "Mahaveer Jayanti",
    # April
    date(2026, 4, 3): "Good Friday",
    date(2026, 4, 13): "Holiday (HC Calendar)",
    date(2026, 4, 14): "Dr. B.R. Ambedkar Jayanti",
    date(2026, 4, 20): "Basava Jayanti/Akshaya Tritiya",
    # May
    date(2026, 5, 1): "May Day",
    date(2026, 5, 28): "Bakrid*",
    # June
    date(2026, 6, 26): "Last Day of Moharam*",
    # August
    date(2026, 8, 15): "Independence Day",
    date(2026, 8, 21): "Holiday (HC Calendar)",
    date(2026, 8, 26): "Id-Milad*",
    # September
    date(2026, 9, 4): "Holiday (HC Calendar)",
    date(2026, 9, 14): "Varasiddhi Vinayaka Vratha",
    # October
    date(2026, 10, 2): "Mahatma Gandhi Jayanti",
    date(2026, 10, 9): "Maharnavami/Ayudhapooja",
    date(2026, 10, 11): "Vijayadashami",
    # November
    date(2026, 11, 9): "Holiday (HC Calendar)",
    date(2026, 11, 10): "Balipadyami/Deepavali",
    date(2026, 11, 27): "Kanakadasa Jayanti",
    # December
    date(2026, 12, 25): "Christmas Day",
}

# One name per date; where the published calendar lists two observances on
# the same day the first one is kept.
RESTRICTED_HOLIDAYS_2026 = {
    date(2026, 1, 1): "New Year's Day",
    date(2026, 1, 27): "Sri Madhvanavami",
    date(2026, 2, 4): "Shab-e-Barat",
    date(2026, 3, 2): "Holi Festival",
    date(2026, 3, 17): "Shab-e-Khader",
    date(2026, 3, 20): "Jamat-Ul-Vida",
    date(2026, 3, 23): "Devara Dasimayya Jayanti",
    date(2026, 3, 27): "Sri Ramanavami",
    date(2026, 4, 4): "Holy Saturday",
    date(2026, 4, 9): "Sri Krishnajanmashtami",
    date(2026, 4, 21): "Sri Shankaracharya Jayanti",
    date(2026, 4, 22): "Sri Ramanujacharya Jayanti",
    date(2026, 7, 27): "Yajur Upakarma",
    date(2026, 8, 9): "Kanya Mariyamma Jayanti",
    date(2026, 8, 28): "Brahma Shri Narayana Guru Jayanti/Raksha Bandhan",
    date(2026, 9, 17): "Vishwakarma Jayanti",
    date(2026, 9, 25): "Ananta Padmanabha Vratha",
    date(2026, 10, 21): "Sri Varamahalakshmi Vratha",
    date(2026, 11, 24): "Guru Nanak Jayanti",
    date(2026, 11, 26): "Huttari Festival",
    date(2026, 12, 24): "Christmas Eve",
}

# Saturdays on which the courts sit
SITTING_DAYS_HIGH_COURT_2026 = frozenset({
    date(2026, 1, 31),
    date(2026, 2, 21),
    date(2026, 4, 18),
    date(2026, 4, 25),
    date(2026, 8, 29),
    date(2026, 9, 19),
    date(2026, 11, 21),
})

SITTING_DAYS_DISTRICT_COURT_2026 = frozenset({
    date(2026, 1, 24),
    date(2026, 2, 28),
    date(2026, 3, 28),
    date(2026, 4, 25),
    date(2026, 6, 27),
    date(2026, 7, 25),
    date(2026, 8, 22),
    date(2026, 9, 26),
    date(2026, 11, 28),
})
