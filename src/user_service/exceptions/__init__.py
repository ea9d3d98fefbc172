# user_service/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # App-level errors (RepositoryError, NotFoundError, StorageError, SignupError)
# │   ├── integrity_classifier.py    # Storage error -> SignupErrorKind
# │   └── mapper.py                  # Rollback / translation context managers for repositories
