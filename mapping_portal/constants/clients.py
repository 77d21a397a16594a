BASELINE_CLIENT_MAPPINGS = (
    {
        "client_code": "GLOBEX",
        "client_name": "Globex Corporation",
        "source_table": "globex_staff_records",
        "target_model": "dim_candidate",
        "field_mappings": {
            "candidate_id": "staff_id",
            "full_name": "full_name",
            "email": "work_email",
            "phone_number": "phone",
            "hire_date": "onboard_date",
            "hourly_rate": "pay_rate",
            "client_code": "'GLOBEX'",
        },
    },
    {
        "client_code": "WAYNE",
        "client_name": "Wayne Enterprises",
        "source_table": "wayne_enterprises_workers",
        "target_model": "dim_candidate",
        "field_mappings": {
            "candidate_id": "worker_id",
            "full_name": "first_name || ' ' || last_name",
            "email": "email",
            "phone_number": "contact_phone",
            "hire_date": "hire_date",
            "hourly_rate": "hourly_wage",
            "client_code": "'WAYNE'",
        },
    },
)

BASELINE_CLIENT_FILES = frozenset(
    f"{client['client_code'].lower()}.yml" for client in BASELINE_CLIENT_MAPPINGS
)

TARGET_MODELS = {
    "dim_candidate": {
        "name": "dim_candidate",
        "description": "Candidate dimension table",
        "fields": (
            {"name": "candidate_id", "type": "string", "required": True, "description": "Unique identifier"},
            {"name": "full_name", "type": "string", "required": True, "description": "Complete name"},
            {"name": "email", "type": "string", "required": True, "description": "Contact email"},
            {"name": "phone_number", "type": "string", "required": False, "description": "Formatted phone"},
            {"name": "hire_date", "type": "date", "required": True, "description": "When placed"},
            {"name": "hourly_rate", "type": "decimal", "required": False, "description": "Bill rate"},
            {"name": "client_code", "type": "string", "required": True, "description": "Client identifier"},
        ),
    },
    "dim_placement": {
        "name": "dim_placement",
        "description": "Placement dimension table",
        "fields": (
            {"name": "placement_id", "type": "string", "required": True, "description": "Unique placement ID"},
            {"name": "candidate_id", "type": "string", "required": True, "description": "Reference to candidate"},
            {"name": "position_title", "type": "string", "required": True, "description": "Job title"},
            {"name": "start_date", "type": "date", "required": True, "description": "Placement start"},
            {"name": "end_date", "type": "date", "required": False, "description": "Placement end"},
            {"name": "client_code", "type": "string", "required": True, "description": "Client identifier"},
        ),
    },
}

TRANSFORM_FUNCTIONS = (
    {"name": "CONCAT", "description": "Combine multiple fields", "args": "multiple", "example": "CONCAT(field1, ' ', field2)"},
    {"name": "CAST", "description": "Convert data type", "args": "type", "example": "CAST(field AS DATE)"},
    {"name": "UPPER", "description": "Uppercase text", "args": "single", "example": "UPPER(field)"},
    {"name": "LOWER", "description": "Lowercase text", "args": "single", "example": "LOWER(field)"},
    {"name": "TRIM", "description": "Remove whitespace", "args": "single", "example": "TRIM(field)"},
    {"name": "COALESCE", "description": "First non-null value", "args": "multiple", "example": "COALESCE(field1, field2)"},
    {"name": "SUBSTRING", "description": "Extract portion", "args": "range", "example": "SUBSTRING(field, 1, 5)"},
)

DEFAULT_CAST_TYPE = "DATE"
