from enum import Enum


class CurveType(Enum):
    LINEAR = "LINEAR"
    EXPONENTIAL = "EXPONENTIAL"

    @classmethod
    def from_str(cls, type_str: str) -> "CurveType":
        """
        Convert a string to a CurveType enum.
        :param type_str: str
        :return: CurveType or NotImplementedError
        """
        if type_str.upper() == CurveType.LINEAR.name:
            return CurveType.LINEAR
        elif type_str.upper() == CurveType.EXPONENTIAL.name:
            return CurveType.EXPONENTIAL
        else:
            raise NotImplementedError(f"No curve type enum for {type_str}")

    def __hash__(self):
        return hash(self.value)

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class OrderSide(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def from_str(cls, side_str):
        if side_str.upper() == OrderSide.BUY.name:
            return OrderSide.BUY
        elif side_str.upper() == OrderSide.SELL.name:
            return OrderSide.SELL
        else:
            raise NotImplementedError(f"No order side enum for {side_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class PoolStatus(Enum):
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"

    @classmethod
    def from_str(cls, status_str):
        if status_str.upper() == PoolStatus.ACTIVE.name:
            return PoolStatus.ACTIVE
        elif status_str.upper() == PoolStatus.ENDED.name:
            return PoolStatus.ENDED
        else:
            raise NotImplementedError(f"No pool status enum for {status_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()
