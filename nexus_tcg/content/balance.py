# nexus_tcg/content/balance.py
DEFAULTS = {
    "hero_hp": 30,
    "board_size": 3,
    "deck_size": 20,
    "opening_hand": 5,
    "phase_draw": 2,
    "starting_dice": 10,
}

CAPS = {
    "gauge_max": 3,
    "hero_min": 0,
}

ELEMENTS = (
    "Pyro",
    "Hydro",
    "Cryo",
    "Electro",
    "Geo",
    "Anemo",
    "Quantum",
    "Imaginary",
    "Neutral",
)

# wildcard die: pays any cost, never rolled
INFINITE = "Infinite"

COMBAT_MODES = {
    "basic": {"cost": 1, "element": None, "bonus": 0, "gauge": +1, "requires_gauge": 0},
    "skill": {"cost": 3, "element": "own", "bonus": 1, "gauge": +1, "requires_gauge": 0},
    "ult": {"cost": 5, "element": "own", "bonus": 3, "gauge": "reset", "requires_gauge": 3},
}
