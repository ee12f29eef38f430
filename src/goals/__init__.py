from .editor import (
    adjusted_target_amount,
    default_parameters,
    month_options,
    new_default_event,
    sort_events,
    validate_plan_inputs,
)
