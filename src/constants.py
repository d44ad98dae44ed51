from __future__ import annotations

from decimal import Decimal
from enum import IntEnum

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
# Wrapped SOL mint, used as the asset id for native balances.
SOL_MINT = "So11111111111111111111111111111111111111112"
LAMPORTS_PER_SOL = Decimal(1_000_000_000)

NATIVE_TREASURY_SEED = b"native-treasury"

GOVERNANCE_PROGRAM_IDS = (
    "GovER5Lthms3bLBqWub97yVrMmEogzX7xNjdXpPPCVZw",
    "gUAedF544JeE6NYbQakQvribHykUNgaPJqcgf3UQVnY",
    "GqTPL6qRf5aUuqscLh8Rg2HTxPUXfhhAXDptTLhp1t2J",
    "DcG2PZTnj8s4Pnmp7xJswniCskckU5E6XsrKuyD7NYFK",
    "AEauWRrpn9Cs6GXujzdp1YhMmv2288kBt3SdEcPYEerr",
    "G41fmJzd29v7Qmdi8ZyTBBYa98ghh3cwHBTexqCG1PQJ",
    "GovHgfDPyQ1GwazJTDY2avSVY8GGcpmCapmmCsymRaGe",
    "pytGY6tWRgGinSCvRLnSv4fHfBTMoiDGiCsesmHWM6U",
    "J9uWvULFL47gtCPvgR3oN7W357iehn5WF2Vn9MJvcSxz",
    "JPGov2SBA6f7XSJF5R4Si5jEJekGiyrwP2m7gSEqLUs",
    "Ghope52FuF6HU3AAhJuAAyS2fiqbVhkAotb7YprL5tdS",
    "5sGZEdn32y8nHax7TxEyoHuPS3UXfPWtisgm8kqxat8H",
    "smfjietFKFJ4Sbw1cqESBTpPhF4CwbMwN8kBEC1e5ui",
    "GovMaiHfpVPw8BAM1mbdzgmSZYDw2tdP32J2fapoQoYs",
    "GCockTxUjxuMdojHiABVZ5NKp6At8eTKDiizbPjiCo4m",
    "HT19EcD68zn7NoCF79b2ucQF8XaMdowyPt5ccS6g1PUx",
    "GRNPT8MPw3LYY6RdjsgKeFji5kMiG1fSxnxDjDBu4s73",
    "ALLGnZikNaJQeN4KCAbDjZRSzvSefUdeTpk18yfizZvT",
    "A7kmu2kUcnQwAVn8B4znQmGJeUrsJ1WEhYVMtmiBLkEr",
    "MGovW65tDhMMcpEmsegpsdgvzb6zUwGsNjhXFxRAnjd",
    "jdaoDN37BrVRvxuXSeyR7xE5Z9CAoQApexGrQJbnj6V",
    "GMnke6kxYvqoAXgbFGnu84QzvNHoqqTnijWSXYYTFQbB",
    "hgovkRU6Ghe1Qoyb54HdSLdqN7VtxaifBzRmh9jtd3S",
    "jtogvBNH3WBSWDYD5FJfQP2ZxNTuf82zL8GkEhPeaJx",
    "dgov7NC8iaumWw3k8TkmLDybvZBCmd1qwxgLAGAsWxf",
)


class GovernanceAccountType(IntEnum):
    """Leading tag byte of SPL governance program accounts."""

    REALM_V1 = 1
    GOVERNANCE_V1 = 3
    PROGRAM_GOVERNANCE_V1 = 4
    MINT_GOVERNANCE_V1 = 9
    TOKEN_GOVERNANCE_V1 = 10
    REALM_V2 = 16
    GOVERNANCE_V2 = 18
    PROGRAM_GOVERNANCE_V2 = 19
    MINT_GOVERNANCE_V2 = 20
    TOKEN_GOVERNANCE_V2 = 21


REALM_ACCOUNT_TYPES = (GovernanceAccountType.REALM_V1, GovernanceAccountType.REALM_V2)
GOVERNANCE_ACCOUNT_TYPES = (
    GovernanceAccountType.GOVERNANCE_V1,
    GovernanceAccountType.PROGRAM_GOVERNANCE_V1,
    GovernanceAccountType.MINT_GOVERNANCE_V1,
    GovernanceAccountType.TOKEN_GOVERNANCE_V1,
    GovernanceAccountType.GOVERNANCE_V2,
    GovernanceAccountType.PROGRAM_GOVERNANCE_V2,
    GovernanceAccountType.MINT_GOVERNANCE_V2,
    GovernanceAccountType.TOKEN_GOVERNANCE_V2,
)
