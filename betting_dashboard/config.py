"""
Configuration: feed endpoints, refresh cadence, field maps, export layout.

WIRE_FIELD_MAP maps each key emitted by the report producer to the
attribute name used on the record dataclasses. PRODUCT_FIELDS and
RISK_FIELDS list the optional field groups legal for each report type.
"""

import os

# ---------------------------------------------------------------------------
# Feed endpoints
# ---------------------------------------------------------------------------
API_URL = os.environ.get("BETTING_DASHBOARD_API_URL", "http://localhost:3001")
DATA_ENDPOINT = "/api/dashboard-data"
TRIGGER_ENDPOINT = "/api/fetch-messages"
HTTP_TIMEOUT_SECONDS = 15.0

# ---------------------------------------------------------------------------
# Refresh cadence
# ---------------------------------------------------------------------------
AUTO_REFRESH_SECONDS = float(os.environ.get("BETTING_DASHBOARD_REFRESH_SECONDS", "60"))

# ---------------------------------------------------------------------------
# Date contract with the producer
# ---------------------------------------------------------------------------
# Records carry "dd/mm" labels in Brasilia local time, no year.
REPORT_TIMEZONE = "America/Sao_Paulo"
DATE_LABEL_FORMAT = "%d/%m"
TIME_LABEL_FORMAT = "%H:%M"

LAST_N_WINDOWS: dict[str, int] = {
    "last20": 20,
    "last50": 50,
}

# ---------------------------------------------------------------------------
# Record fields
# ---------------------------------------------------------------------------
IDENTITY_WIRE_KEYS = {
    "date": "data",
    "time": "hora",
    "report_type": "tipoRelatorio",
}

# wire key -> attribute
WIRE_FIELD_MAP: dict[str, str] = {
    # core financials
    "ggr": "ggr",
    "ngr": "ngr",
    "turnoverTotal": "turnover_total",
    "depositos": "deposits",
    "saques": "withdrawals",
    "fluxoLiquido": "net_flow",
    "jogadoresUnicos": "unique_players",
    "apostadores": "bettors",
    "depositantes": "depositors",
    # product split
    "cassinoGGR": "casino_ggr",
    "cassinoTurnover": "casino_turnover",
    "sportsbookGGR": "sportsbook_ggr",
    "sportsbookTurnover": "sportsbook_turnover",
    # balance
    "saldoInicial": "opening_balance",
    "saldoFinal": "closing_balance",
    "variacaoSaldo": "balance_delta",
    # behaviour averages
    "depositoMedio": "avg_deposit",
    "numeroMedioDepositos": "avg_deposit_count",
    "saqueMedio": "avg_withdrawal",
    "ticketMedio": "avg_ticket",
    "ggrMedioJogador": "avg_ggr_per_player",
    # bonus
    "bonusConcedidos": "bonus_granted",
    "bonusConvertidos": "bonus_converted",
    "taxaConversaoBonus": "bonus_conversion_rate",
    "apostasComBonus": "bets_with_bonus",
    "custoBonus": "bonus_cost",
    "count": "count",
}

# English camelCase aliases accepted alongside the producer's keys
FIELD_ALIASES: dict[str, str] = {
    "turnoverTotal": "turnover_total",
    "deposits": "deposits",
    "withdrawals": "withdrawals",
    "netFlow": "net_flow",
    "uniquePlayers": "unique_players",
    "bettors": "bettors",
    "depositors": "depositors",
    "casinoGGR": "casino_ggr",
    "casinoTurnover": "casino_turnover",
    "openingBalance": "opening_balance",
    "closingBalance": "closing_balance",
    "balanceDelta": "balance_delta",
    "avgDeposit": "avg_deposit",
    "avgDepositCount": "avg_deposit_count",
    "avgWithdrawal": "avg_withdrawal",
    "avgTicket": "avg_ticket",
    "avgGGRPerPlayer": "avg_ggr_per_player",
    "bonusGranted": "bonus_granted",
    "bonusConverted": "bonus_converted",
    "bonusConversionRate": "bonus_conversion_rate",
    "betsWithBonus": "bets_with_bonus",
    "bonusCost": "bonus_cost",
}

INTEGER_FIELDS = {"unique_players", "bettors", "depositors", "count"}

CORE_FIELDS = (
    "ggr", "ngr", "turnover_total", "deposits", "withdrawals",
    "net_flow", "unique_players", "bettors", "depositors",
)
PRODUCT_FIELDS = (
    "casino_ggr", "casino_turnover", "sportsbook_ggr", "sportsbook_turnover",
)
BALANCE_FIELDS = ("opening_balance", "closing_balance", "balance_delta")
BEHAVIOR_FIELDS = (
    "avg_deposit", "avg_deposit_count", "avg_withdrawal",
    "avg_ticket", "avg_ggr_per_player",
)
BONUS_FIELDS = (
    "bonus_granted", "bonus_converted", "bonus_conversion_rate",
    "bets_with_bonus", "bonus_cost",
)
RISK_FIELDS = BALANCE_FIELDS + BEHAVIOR_FIELDS + BONUS_FIELDS

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
# (header, attribute) in file order
EXPORT_COLUMNS: list[tuple[str, str]] = [
    ("Date", "date"),
    ("Time", "time"),
    ("Report Type", "report_type"),
    ("GGR", "ggr"),
    ("NGR", "ngr"),
    ("Turnover Total", "turnover_total"),
    ("Deposits", "deposits"),
    ("Withdrawals", "withdrawals"),
    ("Net Flow", "net_flow"),
    ("Unique Players", "unique_players"),
    ("Bettors", "bettors"),
    ("Depositors", "depositors"),
    ("Casino GGR", "casino_ggr"),
    ("Casino Turnover", "casino_turnover"),
    ("Sportsbook GGR", "sportsbook_ggr"),
    ("Sportsbook Turnover", "sportsbook_turnover"),
    ("Opening Balance", "opening_balance"),
    ("Closing Balance", "closing_balance"),
    ("Balance Delta", "balance_delta"),
    ("Avg Deposit", "avg_deposit"),
    ("Avg Deposit Count", "avg_deposit_count"),
    ("Avg Withdrawal", "avg_withdrawal"),
    ("Avg Ticket", "avg_ticket"),
    ("Avg GGR per Player", "avg_ggr_per_player"),
    ("Bonus Granted", "bonus_granted"),
    ("Bonus Converted", "bonus_converted"),
    ("Bonus Conversion Rate", "bonus_conversion_rate"),
    ("Bets with Bonus", "bets_with_bonus"),
    ("Bonus Cost", "bonus_cost"),
    ("Count", "count"),
]

EXPORT_FILENAME_TEMPLATE = "dashboard-export-{date}.csv"
EXPORT_MIME_TYPE = "text/csv"
EXPORT_ENCODING = "utf-8"

# ---------------------------------------------------------------------------
# Anomaly rules
# ---------------------------------------------------------------------------
ANOMALY_THRESHOLDS: dict[str, float] = {
    "negative_ggr_floor": -10_000.0,
    "spike_multiplier": 5.0,
    "spike_window": 10,
    "deposit_withdrawal_ratio": 10.0,
    "deposit_imbalance_min": 50_000.0,
    "net_flow_floor": -100_000.0,
    "bonus_conversion_max_pct": 80.0,
}

# Key fields scored for completeness, per report type
QUALITY_FIELDS: dict[str, tuple[str, ...]] = {
    "Performance de Produtos": (
        "ggr", "ngr", "turnover_total", "casino_ggr", "sportsbook_ggr",
    ),
    "Time de Risco": (
        "deposits", "withdrawals", "unique_players", "bettors", "depositors",
    ),
}

QUALITY_GRADES = [
    (90.0, "EXCELLENT"),
    (75.0, "GOOD"),
    (60.0, "FAIR"),
]
