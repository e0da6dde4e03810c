"""Domain modules package."""

from tutorbook.modules.appointments import models as appointments_models  # noqa: F401
from tutorbook.modules.identity import models as identity_models  # noqa: F401
from tutorbook.modules.messaging import models as messaging_models  # noqa: F401
from tutorbook.modules.scheduling import models as scheduling_models  # noqa: F401
from tutorbook.modules.students import models as students_models  # noqa: F401
from tutorbook.modules.teachers import models as teachers_models  # noqa: F401
