# dayflow_api/models/__init__.py
import importlib
import pkgutil


def load_all():
    """Import every model module (payroll subpackage included) so db.metadata is complete."""
    for mod in pkgutil.walk_packages(__path__, prefix=f"{__name__}."):
        importlib.import_module(mod.name)
