"""
End of Line - authoritative game-session engine
Territory influence contest + card cost/effect pipeline, no web framework.
"""

MAX_PLAYERS = 2
ACTIONS_PER_TURN = 3

STARTING_CREDITS = 5
STARTING_HEALTH = 40
STARTING_FACTION_RESOURCES = 5

# Territory control thresholds on corporate_influence (0-100)
CORP_CONTROL_THRESHOLD = 60
RUNNER_CONTROL_THRESHOLD = 40

# Run resolution: success pushes influence down, failure pushes it back up
RUN_SUCCESS_INFLUENCE = -20
RUN_FAILURE_INFLUENCE = 10
RUN_SUCCESS_CREDITS = 2
