"""
Тесты конфигурации и аргументов командной строки.
"""
from httpd.config import ServerConfig, TimeoutConfig
from httpd.main import load_config, parse_args


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig.default()

        assert config.listen_host == "localhost"
        assert config.listen_port == 4221
        assert config.directory == "./tmp"
        assert config.timeouts.read is None
        assert config.address == "localhost:4221"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "listen: \"0.0.0.0:8080\"\n"
            "directory: /srv/files\n"
            "timeouts:\n"
            "  read_ms: 1500\n"
            "logging:\n"
            "  level: debug\n"
        )

        config = ServerConfig.from_yaml(str(path))

        assert config.listen_host == "0.0.0.0"
        assert config.listen_port == 8080
        assert config.directory == "/srv/files"
        assert config.timeouts.read == 1.5
        assert config.timeouts.write is None
        assert config.log_level == "debug"

    def test_from_yaml_host_only(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("listen: 127.0.0.1\n")

        config = ServerConfig.from_yaml(str(path))

        assert config.listen_host == "127.0.0.1"
        assert config.listen_port == 4221
        assert config.directory == "./tmp"

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert ServerConfig.from_yaml(str(path)) == ServerConfig()

    def test_timeouts_in_seconds(self):
        timeouts = TimeoutConfig(read_ms=250, write_ms=2000)

        assert timeouts.read == 0.25
        assert timeouts.write == 2.0


class TestArgs:

    def test_directory_flag(self):
        config = load_config(parse_args(["--directory", "/tmp/data", "-p", "9000"]))

        assert config.directory == "/tmp/data"
        assert config.listen_port == 9000

    def test_defaults(self):
        config = load_config(parse_args([]))

        assert config == ServerConfig()

    def test_config_file_used(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("directory: from-file\nlisten: \"0.0.0.0:8000\"\n")

        config = load_config(parse_args(["-c", str(path)]))

        assert config.directory == "from-file"
        assert config.listen_port == 8000

    def test_flags_override_config_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("directory: from-file\nlisten: \"0.0.0.0:8000\"\n")

        config = load_config(parse_args(["-c", str(path), "-d", "from-flag"]))

        assert config.directory == "from-flag"
        assert config.listen_port == 8000

    def test_missing_config_file_falls_back_to_defaults(self, tmp_path):
        config = load_config(parse_args(["-c", str(tmp_path / "nope.yaml")]))

        assert config == ServerConfig()
