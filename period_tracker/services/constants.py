"""
Constants shared by cycle, medication and overlay services.
"""

# Ovulation is modelled as this many days before the next period start
LUTEAL_PHASE_DAYS = 14

# Fertile window around ovulation: days before, days after
FERTILE_DAYS_BEFORE_OVULATION = 5
FERTILE_DAYS_AFTER_OVULATION = 1

# Pill packs are followed by a fixed break week
BREAK_WEEK_DAYS = 7

# How far past today virtual pill-schedule days are generated
SCHEDULE_HORIZON_DAYS = 90

# Trailing window used for the pill compliance percentage
COMPLIANCE_WINDOW_DAYS = 30

# Number of future periods drawn on the calendar
PREDICTION_COUNT = 10

VERBOSE_LABELS = {
    "period_range": "Period Day",
    "period_clickable": "🩸 Period ({days} days)",
    "current_period_range": "Current Period",
    "current_period_clickable": "🔴 Current Period (Day {day})",
    "ovulation": "🥚 Ovulation",
    "symptoms": "🤢 {symptoms}",
    "note": "📝 {text}",
    "pill_taken": "💊 Pill Taken",
    "pill_taken_time": "💊 Pill Taken ({time})",
    "pill_missed": "💊 Pill Missed",
    "pill_missed_reason": "💊 Pill Missed - {reason}",
    "pill_past": "💊 Scheduled Pill (Day {pack_day})",
    "pill_future": "💊 Take Pill (Day {pack_day})",
    "prediction_range": "🔮 Expected Period",
    "prediction_clickable": "🔮 Expected Period ({days} days)",
    "safe_days": "Safe Days",
}

CONDENSED_LABELS = {
    "period_range": "Period Day",
    "period_clickable": "🩸",
    "current_period_range": "Current Period",
    "current_period_clickable": "🔴",
    "ovulation": "Ovulation",
    "symptoms": "📝",
    "note": "📝",
    "pill_taken": "💊",
    "pill_taken_time": "💊({time})",
    "pill_missed": "💊 ❌",
    "pill_missed_reason": "💊 ❌",
    "pill_past": "💊 ⏰",
    "pill_future": "💊 📅",
    "prediction_range": "🔮",
    "prediction_clickable": "🔮",
    "safe_days": "Safe Days",
}

STYLE_HINTS = {
    "period_range": "fc-event-period",
    "period_clickable": "fc-event-period-clickable",
    "current_period_range": "fc-event-period",
    "current_period_clickable": "fc-event-current-period-clickable",
    "ovulation": "fc-event-ovulation",
    "note": "fc-event-note",
    "pill_taken": "fc-event-pill-taken",
    "pill_missed": "fc-event-pill-missed",
    "pill_past": "fc-event-pill-past",
    "pill_future": "fc-event-pill-future",
    "prediction_range": "fc-event-period-prediction",
    "prediction_clickable": "fc-event-period-prediction-clickable",
    "safe_days": "fc-event-safe-days",
}
