# db_tables.py: single source of truth for table names
MATCHES          = "matches"
TEAMS            = "teams"
TEAM_MEMBERS     = "team_members"
PROFILES         = "profiles"
USER_ROLES       = "user_roles"
SEASONS          = "seasons"
BOARD_DOCUMENTS  = "board_documents"
