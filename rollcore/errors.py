# rollcore/errors.py


class DiceError(ValueError):
    pass


class MalformedInput(DiceError):
    """骰式、選項或元素名稱無法辨識。"""


class ShapeMismatch(DiceError):
    """結果的形狀不符合解讀需求（例如不是單一擲骰）。"""
