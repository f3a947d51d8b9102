DOMAIN = "prusa_link"

CONF_ENDPOINT = "endpoint"
CONF_API_KEY = "api_key"

# HTTP defaults
DEFAULT_TIMEOUT = 10
DEFAULT_SCAN_INTERVAL = 30
HEADER_API_KEY = "X-Api-Key"
PRINTER_PATH = "/printer"

# Sensor naming convention used by the /printer "temperature" map
BED_SENSOR = "bed"
TOOL_SENSOR_PREFIX = "tool"
