"""
Color Delta E Calculation Module

CIEDE2000 색차 계산 (순수 Python/NumPy 구현).

References:
- Sharma, G., Wu, W., & Dalal, E. N. (2005).
  "The CIEDE2000 color-difference formula: Implementation notes,
   supplementary test data, and mathematical observations."
  Color Research & Application, 30(1), 21-30.
"""

from typing import Sequence, Tuple, Union

import numpy as np

LabLike = Union[Tuple[float, float, float], Sequence[float], np.ndarray]

_POW25_7 = 25.0**7


def _unpack(lab: LabLike) -> Tuple[float, float, float]:
    return float(lab[0]), float(lab[1]), float(lab[2])


def delta_e_2000(
    lab1: LabLike,
    lab2: LabLike,
    kL: float = 1.0,
    kC: float = 1.0,
    kH: float = 1.0,
) -> float:
    """
    CIEDE2000 색차(ΔE00) 계산.

    Args:
        lab1: 첫 번째 색상 (L*, a*, b*) - tuple, LabColor 또는 ndarray
        lab2: 두 번째 색상 (L*, a*, b*)
        kL: 명도 가중치 (기본값 1.0)
        kC: 채도 가중치 (기본값 1.0)
        kH: 색상 가중치 (기본값 1.0)

    Returns:
        ΔE2000 값 (0 이상)

    Examples:
        >>> round(delta_e_2000((50.0, 2.6772, -79.7751), (50.0, 0.0, -82.7485)), 4)
        2.0425
    """
    L1, a1, b1 = _unpack(lab1)
    L2, a2, b2 = _unpack(lab2)

    # 1. Chroma 평균과 a* 보정 계수 G
    C1 = np.sqrt(a1**2 + b1**2)
    C2 = np.sqrt(a2**2 + b2**2)
    C_bar7 = ((C1 + C2) / 2.0) ** 7
    G = 0.5 * (1 - np.sqrt(C_bar7 / (C_bar7 + _POW25_7)))

    a1_p = (1 + G) * a1
    a2_p = (1 + G) * a2
    C1_p = np.sqrt(a1_p**2 + b1**2)
    C2_p = np.sqrt(a2_p**2 + b2**2)

    # 2. 보정된 hue angle (0~360)
    h1_p = np.degrees(np.arctan2(b1, a1_p)) % 360.0
    h2_p = np.degrees(np.arctan2(b2, a2_p)) % 360.0

    # 3. ΔL', ΔC', ΔH'
    dL_p = L2 - L1
    dC_p = C2_p - C1_p

    chroma_product = C1_p * C2_p
    if chroma_product == 0:
        dh_p = 0.0
    else:
        dh_p = h2_p - h1_p
        if dh_p > 180:
            dh_p -= 360
        elif dh_p < -180:
            dh_p += 360
    dH_p = 2 * np.sqrt(chroma_product) * np.sin(np.radians(dh_p / 2.0))

    # 4. 평균값 L', C', h'
    L_bar_p = (L1 + L2) / 2.0
    C_bar_p = (C1_p + C2_p) / 2.0
    if chroma_product == 0:
        h_bar_p = h1_p + h2_p
    elif abs(h1_p - h2_p) <= 180:
        h_bar_p = (h1_p + h2_p) / 2.0
    elif h1_p + h2_p < 360:
        h_bar_p = (h1_p + h2_p + 360) / 2.0
    else:
        h_bar_p = (h1_p + h2_p - 360) / 2.0

    # 5. 가중 함수 SL, SC, SH
    T = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar_p - 30))
        + 0.24 * np.cos(np.radians(2 * h_bar_p))
        + 0.32 * np.cos(np.radians(3 * h_bar_p + 6))
        - 0.20 * np.cos(np.radians(4 * h_bar_p - 63))
    )
    L_dev2 = (L_bar_p - 50) ** 2
    SL = 1 + (0.015 * L_dev2) / np.sqrt(20 + L_dev2)
    SC = 1 + 0.045 * C_bar_p
    SH = 1 + 0.015 * C_bar_p * T

    # 6. 회전 항 RT (blue 영역 275° 중심 가우시안)
    delta_theta = 30 * np.exp(-(((h_bar_p - 275) / 25) ** 2))
    C_bar_p7 = C_bar_p**7
    RC = 2 * np.sqrt(C_bar_p7 / (C_bar_p7 + _POW25_7))
    RT = -np.sin(np.radians(2 * delta_theta)) * RC

    term_L = dL_p / (kL * SL)
    term_C = dC_p / (kC * SC)
    term_H = dH_p / (kH * SH)

    return float(np.sqrt(term_L**2 + term_C**2 + term_H**2 + RT * term_C * term_H))
