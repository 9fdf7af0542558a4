import configparser
from dataclasses import dataclass, field
from pathlib import Path

TRUE_VALUES = ("true", "1", "yes")


@dataclass
class StorageConfig:
    bucket_endpoint_host: str | None = None  # e.g. s3.us-east-1.amazonaws.com
    assets_host: str = "assets.forge-vtt.com"
    bundle_path: str = "bazaar"
    bundle_prefixes: list[str] = field(default_factory=list)


@dataclass
class IdentityConfig:
    user_id: str | None = None


@dataclass
class HostConfig:
    backend: str = "local"  # "local" or "sftp"
    data_root: str = "."


@dataclass
class SSHConfig:
    host: str
    port: int = 22
    username: str | None = None
    password: str | None = None
    key_file: str | None = None  # Path to SSH private key
    key_passphrase: str | None = None
    use_agent: bool = True
    encoding: str = "utf-8"


@dataclass
class CacheConfig:
    identity_ttl_seconds: int = 300


@dataclass
class ConnectionConfig:
    timeout_seconds: int = 30
    retry_attempts: int = 3
    retry_delay_seconds: int = 1


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str = ""
    console: bool = True
    library_level: str = "WARNING"


@dataclass
class AppConfig:
    storage: StorageConfig
    identity: IdentityConfig
    host: HostConfig
    cache: CacheConfig
    connection: ConnectionConfig
    logging: LogConfig
    ssh: SSHConfig | None = None


def _parse_int(section: configparser.SectionProxy, key: str, label: str = "") -> int:
    value = section.get(key)
    try:
        return int(value)
    except ValueError:
        raise ValueError(
            f"Invalid {label}{key} value in config: '{value}' - must be an integer"
        )


def _parse_bool(section: configparser.SectionProxy, key: str, default: str) -> bool:
    return section.get(key, default).lower() in TRUE_VALUES


def _parse_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(config_path: str | None = None, **cli_args) -> AppConfig:
    """
    Load configuration from an INI file and/or CLI arguments.
    CLI arguments take precedence over config file.

    Args:
        config_path: Path to the INI configuration file.
        **cli_args: Key-value pairs from command line arguments.

    Returns:
        AppConfig: The populated configuration object.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If a value is malformed or the SFTP host is missing.
    """
    storage = StorageConfig()
    identity = IdentityConfig()
    host = HostConfig()
    cache = CacheConfig()
    connection = ConnectionConfig()
    log = LogConfig()
    ssh_config = {
        "host": None,
        "port": 22,
        "username": None,
        "password": None,
        "key_file": None,
        "key_passphrase": None,
        "use_agent": True,
        "encoding": "utf-8",
    }

    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        if parser.has_section("storage"):
            section = parser["storage"]
            if section.get("bucket_endpoint_host"):
                storage.bucket_endpoint_host = section.get("bucket_endpoint_host")
            if section.get("assets_host"):
                storage.assets_host = section.get("assets_host")
            if section.get("bundle_path"):
                storage.bundle_path = section.get("bundle_path").strip("/")
            if section.get("bundle_prefixes"):
                storage.bundle_prefixes = _parse_list(section.get("bundle_prefixes"))

        if parser.has_section("identity"):
            if parser["identity"].get("user_id"):
                identity.user_id = parser["identity"].get("user_id")

        if parser.has_section("host"):
            section = parser["host"]
            if section.get("backend"):
                host.backend = section.get("backend").lower()
            if section.get("data_root"):
                host.data_root = section.get("data_root")

        if parser.has_section("cache"):
            if parser["cache"].get("identity_ttl_seconds"):
                cache.identity_ttl_seconds = _parse_int(parser["cache"], "identity_ttl_seconds")

        if parser.has_section("connection"):
            section = parser["connection"]
            for key in ("timeout_seconds", "retry_attempts", "retry_delay_seconds"):
                if section.get(key):
                    setattr(connection, key, _parse_int(section, key))

        if parser.has_section("logging"):
            section = parser["logging"]
            if section.get("level"):
                log.level = section.get("level")
            if section.get("file"):
                log.file = section.get("file")
            if section.get("console"):
                log.console = _parse_bool(section, "console", "false")
            if section.get("library_level"):
                log.library_level = section.get("library_level")

        if parser.has_section("ssh"):
            section = parser["ssh"]
            for key in ("host", "username", "password", "key_file", "key_passphrase", "encoding"):
                if section.get(key):
                    ssh_config[key] = section.get(key)
            if section.get("port"):
                ssh_config["port"] = _parse_int(section, "port", "SSH ")
            if section.get("use_agent"):
                ssh_config["use_agent"] = _parse_bool(section, "use_agent", "true")

    # Override with CLI arguments (cli_args take precedence)
    if cli_args.get("data_root") is not None:
        host.data_root = cli_args["data_root"]
    if cli_args.get("backend") is not None:
        host.backend = cli_args["backend"].lower()
    if cli_args.get("user_id") is not None:
        identity.user_id = cli_args["user_id"] or None
    if cli_args.get("bucket_endpoint_host") is not None:
        storage.bucket_endpoint_host = cli_args["bucket_endpoint_host"]
    if cli_args.get("ssh_host") is not None:
        ssh_config["host"] = cli_args["ssh_host"]
    if cli_args.get("key_file") is not None:
        ssh_config["key_file"] = cli_args["key_file"]
    if cli_args.get("debug"):
        log.level = "DEBUG"
        log.console = True

    if host.backend not in ("local", "sftp"):
        raise ValueError(f"Invalid host backend: {host.backend}. Must be 'local' or 'sftp'.")

    ssh_obj = None
    if host.backend == "sftp":
        if not ssh_config["host"]:
            raise ValueError("Missing required configuration fields: ssh host")
        ssh_obj = SSHConfig(**ssh_config)

    return AppConfig(
        storage=storage,
        identity=identity,
        host=host,
        cache=cache,
        connection=connection,
        logging=log,
        ssh=ssh_obj,
    )
