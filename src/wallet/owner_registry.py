"""OwnerRegistry — неизменяемый набор владельцев и quorum threshold.

Access-control root: все остальные компоненты спрашивают у реестра,
является ли вызывающий владельцем. Операций изменения после создания нет.
"""

from typing import Iterable, Tuple

from src.core.domain.errors import (
    DuplicateOwner,
    InvalidOwnerAddress,
    InvalidThreshold,
    OwnersNotProvided,
)
from src.core.domain.identity import is_null_identity


class OwnerRegistry:
    """Immutable owner set + threshold.
    
    Порядок проверок при создании:
    1. Пустой список → OwnersNotProvided
    2. threshold ≤ 0 (или не int) → InvalidThreshold
    3. Для каждого кандидата по порядку: null → InvalidOwnerAddress, повтор → DuplicateOwner
    4. threshold > len(owners) → InvalidThreshold (если не allow_unreachable_threshold)
    """
    
    __slots__ = ("_owners", "_owner_set", "_threshold")
    
    def __init__(
        self,
        owners: Iterable[str],
        threshold: int,
        allow_unreachable_threshold: bool = False
    ):
        candidates = list(owners) if owners is not None else []
        
        if not candidates:
            raise OwnersNotProvided("Owner list must not be empty")
        
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold <= 0:
            raise InvalidThreshold(threshold, len(candidates))
        
        seen: set[str] = set()
        for candidate in candidates:
            if is_null_identity(candidate):
                raise InvalidOwnerAddress(candidate)
            if candidate in seen:
                raise DuplicateOwner(candidate)
            seen.add(candidate)
        
        if threshold > len(candidates) and not allow_unreachable_threshold:
            raise InvalidThreshold(threshold, len(candidates))
        
        self._owners: Tuple[str, ...] = tuple(candidates)
        self._owner_set = frozenset(seen)
        self._threshold = threshold
    
    @property
    def owners(self) -> Tuple[str, ...]:
        """Владельцы в порядке передачи при создании."""
        return self._owners
    
    @property
    def threshold(self) -> int:
        return self._threshold
    
    def is_owner(self, identity: object) -> bool:
        try:
            return identity in self._owner_set
        except TypeError:
            # unhashable identity
            return False
    
    def owner_count(self) -> int:
        return len(self._owners)
    
    def __setattr__(self, name, value):
        if hasattr(self, "_threshold"):
            raise AttributeError("OwnerRegistry is immutable")
        object.__setattr__(self, name, value)
    
    def __repr__(self) -> str:
        return f"OwnerRegistry(owners={list(self._owners)!r}, threshold={self._threshold})"
