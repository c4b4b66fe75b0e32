# Utilities
from utils.timezone import now_utc, today_utc, add_months
from utils.ids import generate_id
