"""The eleven configuration domains tracked by the drift detector.

Order matters: domains are retrieved, compared and reported in the order
of :data:`DOMAINS`.
"""

from __future__ import annotations

from .enums import RetrievalKind
from .values import ConfigurationDomain

REGISTRY = ConfigurationDomain(
    domain_id="registry",
    label="Registry variables",
    kind=RetrievalKind.COMMAND,
    source="db2set -all",
    history_file="registry.history",
)

DBM_CFG = ConfigurationDomain(
    domain_id="dbm_cfg",
    label="Database manager configuration",
    kind=RetrievalKind.COMMAND,
    source="db2 get dbm cfg",
    history_file="dbm_cfg.history",
)

DB_CFG = ConfigurationDomain(
    domain_id="db_cfg",
    label="Database configuration",
    kind=RetrievalKind.COMMAND,
    source="db2 get db cfg for {database}",
    history_file="db_cfg.history",
    ignore_prefixes=(
        "First active log file",
        "Database is consistent",
    ),
)

BUFFERPOOLS = ConfigurationDomain(
    domain_id="bufferpools",
    label="Bufferpools",
    kind=RetrievalKind.QUERY,
    source=(
        "SELECT BPNAME, NPAGES, PAGESIZE, NUMBLOCKPAGES, BLOCKSIZE "
        "FROM SYSCAT.BUFFERPOOLS ORDER BY BPNAME"
    ),
    history_file="bufferpools.history",
)

TABLESPACES = ConfigurationDomain(
    domain_id="tablespaces",
    label="Tablespaces",
    kind=RetrievalKind.QUERY,
    source=(
        "SELECT TBSPACE, TBSPACETYPE, DATATYPE, PAGESIZE, EXTENTSIZE, "
        "PREFETCHSIZE, BUFFERPOOLID FROM SYSCAT.TABLESPACES ORDER BY TBSPACE"
    ),
    history_file="tablespaces.history",
)

SCHEMAS = ConfigurationDomain(
    domain_id="schemas",
    label="Schemas",
    kind=RetrievalKind.QUERY,
    source="SELECT SCHEMANAME, OWNER, OWNERTYPE FROM SYSCAT.SCHEMATA ORDER BY SCHEMANAME",
    history_file="schemas.history",
)

TABLES = ConfigurationDomain(
    domain_id="tables",
    label="Tables",
    kind=RetrievalKind.QUERY,
    source=(
        "SELECT TABSCHEMA, TABNAME, TYPE, TBSPACE FROM SYSCAT.TABLES "
        "ORDER BY TABSCHEMA, TABNAME"
    ),
    history_file="tables.history",
)

AUTO_RUNSTATS = ConfigurationDomain(
    domain_id="auto_runstats",
    label="Automatic runstats policy",
    kind=RetrievalKind.POLICY,
    source="AUTO_RUNSTATS",
    history_file="auto_runstats.history",
    policy_file="autoRunstats.xml",
)

AUTO_REORG = ConfigurationDomain(
    domain_id="auto_reorg",
    label="Automatic reorg policy",
    kind=RetrievalKind.POLICY,
    source="AUTO_REORG",
    history_file="auto_reorg.history",
    policy_file="autoReorg.xml",
)

AUTO_BACKUP = ConfigurationDomain(
    domain_id="auto_backup",
    label="Automatic backup policy",
    kind=RetrievalKind.POLICY,
    source="AUTO_BACKUP",
    history_file="auto_backup.history",
    policy_file="autoBackup.xml",
)

MAINTENANCE_WINDOW = ConfigurationDomain(
    domain_id="maintenance_window",
    label="Maintenance window policy",
    kind=RetrievalKind.POLICY,
    source="MAINTENANCE_WINDOW",
    history_file="maintenance_window.history",
    policy_file="maintWindow.xml",
)

DOMAINS: tuple[ConfigurationDomain, ...] = (
    REGISTRY,
    DBM_CFG,
    DB_CFG,
    BUFFERPOOLS,
    TABLESPACES,
    SCHEMAS,
    TABLES,
    AUTO_RUNSTATS,
    AUTO_REORG,
    AUTO_BACKUP,
    MAINTENANCE_WINDOW,
)

POLICY_DOMAINS: tuple[ConfigurationDomain, ...] = tuple(d for d in DOMAINS if d.is_policy)


def get_domain(domain_id: str) -> ConfigurationDomain:
    """Return the domain registered under *domain_id*.

    Raises ``KeyError`` if not found.
    """
    for domain in DOMAINS:
        if domain.domain_id == domain_id:
            return domain
    available = [d.domain_id for d in DOMAINS]
    raise KeyError(f"Domain '{domain_id}' not registered. Available: {available}")
