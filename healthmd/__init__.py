__all__ = ["CSV_HEADER", "KNOWN_SECTION_KEYS", "__version__"]

__version__ = "0.1.0"

# CSV header in exact order, shared by every CSV export
CSV_HEADER = ["Date", "Category", "Metric", "Value", "Unit"]

# Section names the exporter manages; used to detect heading depth when merging
KNOWN_SECTION_KEYS = (
    "sleep",
    "activity",
    "heart",
    "vitals",
    "body",
    "nutrition",
    "mindfulness",
    "mobility",
    "hearing",
    "workouts",
)
