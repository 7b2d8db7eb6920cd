import temploader.prebaked as prebaked  # noqa: PLR0402
from temploader._sifting import SiftedRoles
from temploader._sifting import sift_roles
from temploader._types import ROOT_KEYS
from temploader.config import LoaderConfig
from temploader.exceptions import AmbiguousContentError
from temploader.exceptions import InvalidInputError
from temploader.exceptions import InvalidTemplateError
from temploader.exceptions import LoadFailure
from temploader.exceptions import MissingContentError
from temploader.exceptions import MissingPathError
from temploader.exceptions import NoGlobMatchesError
from temploader.exceptions import TemplateLoadError
from temploader.keys import derive_key
from temploader.keys import rename_to_basename
from temploader.keys import rename_to_stem
from temploader.keys import resolve_from_cwd
from temploader.loader import Loader
from temploader.normalizers import normalize
from temploader.registry import Collection
from temploader.registry import TemplateRegistry
from temploader.templates import NormalizedTemplate
from temploader.templates import VinylTemplate

__all__ = [
    'ROOT_KEYS',
    'AmbiguousContentError',
    'Collection',
    'InvalidInputError',
    'InvalidTemplateError',
    'LoadFailure',
    'Loader',
    'LoaderConfig',
    'MissingContentError',
    'MissingPathError',
    'NoGlobMatchesError',
    'NormalizedTemplate',
    'SiftedRoles',
    'TemplateLoadError',
    'TemplateRegistry',
    'VinylTemplate',
    'derive_key',
    'normalize',
    'prebaked',
    'rename_to_basename',
    'rename_to_stem',
    'resolve_from_cwd',
    'sift_roles',
]
