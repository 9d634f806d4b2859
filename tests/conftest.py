"""Shared fixtures for the betting dashboard test suite."""

from __future__ import annotations

import pandas as pd
import pytest

from factories import product, risk


@pytest.fixture()
def fixed_now() -> pd.Timestamp:
    return pd.Timestamp("2026-10-19 15:30", tz="America/Sao_Paulo")


@pytest.fixture()
def mixed_records() -> list:
    """30 records alternating product/risk in blocks, with distinct GGRs."""
    records = []
    for i in range(30):
        # product for i % 3 != 2, risk otherwise -> 20 product, 10 risk
        if i % 3 == 2:
            records.append(risk(time=f"{i:02d}:00", ggr=float(i), ngr=float(i) / 2))
        else:
            records.append(product(time=f"{i:02d}:00", ggr=float(i), ngr=float(i) / 2))
    return records


@pytest.fixture()
def three_valid_records() -> list:
    return [
        product(time="10:00", ggr=100.0, ngr=50.0, turnover_total=1000.0),
        product(time="11:00", ggr=200.0, ngr=100.0, turnover_total=2000.0),
        product(time="12:00", ggr=300.0, ngr=180.0, turnover_total=3000.0),
    ]


@pytest.fixture()
def feed_payload() -> dict:
    return {
        "success": True,
        "data": [
            {
                "timestamp": "2026-10-19T13:00:00.000Z",
                "data": "19/10",
                "hora": "10:00",
                "tipoRelatorio": "Performance de Produtos",
                "count": 2,
                "ggr": 1500.5,
                "ngr": 1200,
                "turnoverTotal": 25000,
                "cassinoGGR": 900,
                "sportsbookGGR": 600.5,
                "saldoInicial": 123,
                "ggrAcumulado": 9999,
            },
            {
                "data": "19/10",
                "hora": "11:00",
                "tipoRelatorio": "Time de Risco",
                "count": 1,
                "ggr": 0,
                "ngr": None,
                "depositos": "5000.25",
                "saques": 4000,
                "fluxoLiquido": 1000.25,
                "jogadoresUnicos": 321,
                "bonusConcedidos": 200,
                "cassinoGGR": 77,
                "ticketMedio": "n/a",
            },
        ],
        "stats": {
            "totalAlertas": 2,
            "alertasHoje": 2,
            "ultimaAtualizacao": "19/10/2026, 11:05:00",
            "totalRegistrosBrutos": 3,
        },
    }
