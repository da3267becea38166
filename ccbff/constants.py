"""Logical LivePerson service names, store collections and role names."""

# Service names as they appear in the CSDS directory
ACCOUNT_CONFIG_READ_ONLY = "accountConfigReadOnly"
ACCOUNT_CONFIG_READ_WRITE = "accountConfigReadWrite"
MSG_HIST = "msgHist"
ASYNC_MESSAGING_ENT = "asyncMessagingEnt"
LE_DATA_REPORTING = "leDataReporting"
SENTINEL = "sentinel"
IDP = "idp"
CB_LE_INTEGRATIONS = "cbLeIntegrations"

# Synthesized (not returned by CSDS)
AI_STUDIO = "aistudio"
BOT_LOGS = "botlogs"
BOT = "bot"
BOT_PLATFORM = "botPlatform"
KB = "kb"
CONTEXT = "context"
RECOMMENDATION = "recommendation"
PROACTIVE_HANDOFF = "proactiveHandoff"
PROACTIVE = "proactive"
CONV_BUILD = "convBuild"
BC_MGMT = "bcmgmt"
BC_INTG = "bcintg"
BC_NLU = "bcnlu"

# Document store collections
COLLECTION_TOKENS = "lp_tokens"
COLLECTION_CREDENTIALS = "credentials"
COLLECTION_USER_SETTINGS = "user_settings"
COLLECTION_ACCOUNT_SETTINGS = "account_settings"
COLLECTION_SERVICE_WORKERS = "service_workers"

# LivePerson profile names
ROLE_ADMIN = "Administrator"
ROLE_AGENT = "Agent"
ROLE_CAMPAIGN_MANAGER = "Campaign Manager"
ROLE_AGENT_MANAGER = "Agent Manager"

MANAGER_ROLES = (ROLE_ADMIN, ROLE_AGENT_MANAGER)

# Short role codes carried by locally issued tokens
SHORT_ROLES = {
    "ADMIN": ROLE_ADMIN,
    "AGENT": ROLE_AGENT,
    "CAMPAIGN_MANAGER": ROLE_CAMPAIGN_MANAGER,
    "AGENT_MANAGER": ROLE_AGENT_MANAGER,
}

REVISION_HEADERS = ("ac-revision", "etag")
