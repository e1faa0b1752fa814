from vklogin.infrastructure.persistence.di import PersistenceProvider

__all__ = ["PersistenceProvider"]
