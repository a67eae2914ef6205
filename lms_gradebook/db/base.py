from lms_gradebook.db.base_class import Base  # noqa: F401

# import models so SQLAlchemy registers them on Base.metadata
from lms_gradebook.models import assignment, course, enrollment, grade, submission, user  # noqa: F401,E402
