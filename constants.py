import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

# Clients connect to ws://host:port with no path
RELAY_PATH = "/"

# Seconds a single peer write may take before that peer is skipped
PEER_SEND_TIMEOUT = 5.0
