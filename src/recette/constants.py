"""Constants for recette."""

# Persisted interchange format
SCHEMA_VERSION = 1

# Step defaults
STEP_TITLE_TEMPLATE = "Étape {n}"

# Markup the editing surface emits for an empty buffer
EMPTY_SURFACE_MARKUP = "<p><br></p>"

# Rendering
SQL_TEMPLATE = "select * from ps_s1_scripts_tbl where s1_script_name like '%{digits}J%';"
SQL_DIGITS_PLACEHOLDER = "XXXX"
COVER_NUMBER_PLACEHOLDER = "JIRA-XXX"
COVER_NAME_PLACEHOLDER = "NOM DE LA JIRA"
COVER_TITLE = "Cahier de Recette"
DATE_FORMAT = "%d/%m/%Y"  # fr-FR
CONCLUSION_PREFIX = "BON POUR PROD"

# Export
EXPORT_FILENAME_PREFIX = "cahier-recette"
EXPORT_FALLBACK_NAME = "export"

# Seconds to let a just-updated document settle before a render snapshot
DEFAULT_SETTLE_DELAY = 0.1

CONFIG_FILENAME = "recette.toml"
