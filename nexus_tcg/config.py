"""
Configuration for the Flask app and the room/deck stores
"""
# Any of these can be overridden with a NEXUS_<NAME> environment variable.
SECRET_KEY = 'change-me'  # Overridden in deployment
DATABASE_URL = 'sqlite:///nexus.db'
ROOM_STORE = 'sql'  # 'sql' or 'memory'
ROOM_STORE_FALLBACK = True  # degrade to process memory if the database errors
DECK_STORE = 'sql'  # 'sql' or 'memory'
CONFLICT_RETRIES = 3
CONFLICT_BACKOFF = 0.01
CARDS_PATH = None  # None means the bundled cards.json
ALLOW_END_TURN = True
MIRROR_STARTING_DICE = True  # both seats open with the same dice pool
