# survey_api/db/base.py
from survey_api.db.base_class import Base  # noqa: F401

# Importa todos los modelos que definen tablas para que Base.metadata los conozca
# (alembic autogenerate y create_all en tests).
import survey_api.models  # noqa: F401
