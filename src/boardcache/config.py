import yaml
import logging
from typing import Dict, Any, List, Optional, Union
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator, ConfigDict

from . import constants
from .constants import BackendKind, ResolverKind, LogKind
from .cache.keys import is_entry_name
from .io.fs import FileSystem, DiskFileSystem
from .exceptions import (
    ConfigParsingError,
    ConfigFileMissingError,
    ConfigValidationError,
    PathNotFoundError,
)


logger = logging.getLogger(__name__)


class FsCacheModel(BaseModel):
    """
        Class Config-Validation Model describe `cache.fs`
    """
    base_path: str = constants.DEFAULT_FS_BASE_PATH
    lock_file: str = constants.DEFAULT_LOCK_FILE
    collect_chance_den: Union[int, bool, None] = constants.DEFAULT_COLLECT_CHANCE_DEN

    @field_validator('collect_chance_den')
    @classmethod
    def check_chance_den(cls, value: Union[int, bool, None]) -> Optional[int]:
        """ `false`/null disables collection, otherwise a positive integer"""
        if value is None or value is False:
            return None
        if value is True or value < 1:
            raise ValueError("collect_chance_den must be a positive integer or false")
        return value

    @field_validator('lock_file')
    @classmethod
    def check_lock_file(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError("lock_file must be a plain file name")
        return value


class RedisModel(BaseModel):
    """
        Class Config-Validation Model describe `cache.redis`
    """
    host: str = "localhost"
    port: int = 6379
    password: Optional[str] = None
    database: int = 0


class CacheModel(BaseModel):
    """
        Class Config-Validation Model describe `cache`
    """
    enabled: BackendKind = BackendKind.NONE
    prefix: str = ""
    timeout: int = Field(constants.DEFAULT_CACHE_TIMEOUT, ge=0)
    fs: FsCacheModel = Field(default_factory=FsCacheModel)
    redis: RedisModel = Field(default_factory=RedisModel)

    @field_validator('enabled', mode='before')
    @classmethod
    def resolve_backend_alias(cls, value: Any) -> Any:
        """ Accept legacy names, and `false`/null for a disabled cache"""
        if value is None or value is False:
            return BackendKind.NONE
        if isinstance(value, str) and value.lower() in constants.BACKEND_ALIASES:
            return constants.BACKEND_ALIASES[value.lower()]
        return value

    @model_validator(mode='after')
    def check_lock_file_is_unreachable(self) -> "CacheModel":
        """ No key may normalize to the fs lock file name"""
        if self.enabled is BackendKind.FS and is_entry_name(self.prefix, self.fs.lock_file):
            raise ValueError(
                f"cache.fs.lock_file '{self.fs.lock_file}' can be produced by a key with prefix '{self.prefix}'"
            )
        return self


class DnsModel(BaseModel):
    """
        Class Config-Validation Model describe `dns`
    """
    resolver: ResolverKind = ResolverKind.DNSPYTHON
    timeout: int = Field(constants.DEFAULT_DNS_TIMEOUT, ge=1)
    blacklists: List[Union[str, List[Any]]] = Field(default_factory=list)
    exceptions: List[str] = Field(default_factory=list)
    skip_reserved: bool = True
    rdns_validate: bool = False

    @field_validator('blacklists')
    @classmethod
    def check_blacklists(cls, value: List[Union[str, List[Any]]]) -> List[Union[str, List[Any]]]:
        """ Each provider is a zone, or a [zone, policy] pair"""
        for entry in value:
            if isinstance(entry, list) and (len(entry) not in (1, 2) or not isinstance(entry[0], str)):
                raise ValueError(f"Invalid blacklist provider {entry!r}, expected [zone, policy]")
        return value


class DatabaseModel(BaseModel):
    """
        Class Config-Validation Model describe `database`
    """
    url: str = "sqlite://"
    echo: bool = False


class ThemesModel(BaseModel):
    """
        Class Config-Validation Model describe `themes`
    """
    dir: str = constants.DEFAULT_THEMES_DIR


class LogModel(BaseModel):
    """
        Class Config-Validation Model describe `log`
    """
    name: str = constants.DEFAULT_LOG_NAME
    type: LogKind = LogKind.STDERR
    file_path: Optional[str] = None
    syslog_address: str = "/dev/log"
    levels: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode='after')
    def check_file_path(self) -> "LogModel":
        if self.type is LogKind.FILE and not self.file_path:
            raise ValueError("log.file_path is required for the 'file' log type")
        return self


class ConfigModel(BaseModel):
    """
        Class Config-Validation Model desribe top-level of config
    """
    debug: bool = False
    cache: CacheModel = Field(default_factory=CacheModel)
    dns: DnsModel = Field(default_factory=DnsModel)
    database: DatabaseModel = Field(default_factory=DatabaseModel)
    themes: ThemesModel = Field(default_factory=ThemesModel)
    log: LogModel = Field(default_factory=LogModel)
    model_config = ConfigDict(extra="allow")


class Config:
    """
    Loads and validates the config.yml file using Pydantic models.
    It is the sole gatekeeper for configuration.
    """
    def __init__(self, config_path: str, fs: Optional[FileSystem] = None):
        self.path = config_path
        self.fs = fs or DiskFileSystem()
        logger.info(f"Loading configuration from '{self.path}'...")
        raw_data = self._load_raw_config()

        logger.info("Validating configuration structure with Pydantic...")
        try:
            self.model = ConfigModel.model_validate(raw_data)
            logger.debug(f"Configuration model validated successfully: \n{self.model.model_dump_json(indent=2)}")
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation failed:\n{e}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config without a backing file."""
        config = cls.__new__(cls)
        config.path = "<dict>"
        config.fs = DiskFileSystem()
        try:
            config.model = ConfigModel.model_validate(data)
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation failed:\n{e}")
        return config

    def _load_raw_config(self) -> Dict[str, Any]:
        try:
            content = self.fs.read_text(self.path)
        except (FileNotFoundError, PathNotFoundError):
            raise ConfigFileMissingError(f"Configuration file not found at: {self.path}")
        try:
            config_data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigParsingError(f"Error parsing YAML file: {e}")
        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigParsingError("Configuration file must be a YAML document containing a dictionary.")
        logger.debug(f"Successfully parsed YAML from '{self.path}'.")
        return config_data

    @property
    def debug(self) -> bool:
        return self.model.debug

    @property
    def cache(self) -> CacheModel:
        return self.model.cache

    @property
    def dns(self) -> DnsModel:
        return self.model.dns

    @property
    def database(self) -> DatabaseModel:
        return self.model.database

    @property
    def themes(self) -> ThemesModel:
        return self.model.themes

    @property
    def log(self) -> LogModel:
        return self.model.log
