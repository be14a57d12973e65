import os
import shutil

import pytest
import yaml
from google.protobuf import descriptor_pb2 as d2

import protoc_openapi.main as main_module
from protoc_openapi.main import _include_dirs, main, run
from protoc_openapi.parser.descriptor_loader import ProtocError, _include_args, load_descriptor_set

HAS_PROTOC = shutil.which(os.environ.get("PROTOC", "protoc")) is not None

PROTO_CONTENT = """\
syntax = "proto3";

package users.v1;

enum Status {
    ACTIVE = 0;
    INACTIVE = 1;
}

message User {
    string name = 1;
    int32 age = 2;
    Status status = 3;
    repeated Address addresses = 4;
    optional string nickname = 5;

    message Address {
        string street = 1;
        string city = 2;
    }

    oneof contact {
        string email = 6;
        string phone = 7;
    }
}

message GetUserRequest {
    string id = 1;
}

service UserService {
    // Fetch a single user.
    // GET /users/{id:string} [Users]
    rpc GetUser(GetUserRequest) returns (User);

    // PUT /users/{id:string} [Users, Admin]
    rpc UpdateUser(User) returns (User);

    // POST /users - BODY
    rpc CreateUser(User) returns (User);

    rpc Ping(GetUserRequest) returns (GetUserRequest);
}
"""


@pytest.fixture
def proto_file(tmp_path):
    path = tmp_path / "users.proto"
    path.write_text(PROTO_CONTENT, encoding="utf-8")
    return str(path)


class TestProtocFailures:
    def test_missing_protoc(self, monkeypatch, proto_file):
        monkeypatch.setenv("PROTOC", "definitely-not-a-real-protoc")
        with pytest.raises(ProtocError, match="not found"):
            load_descriptor_set([proto_file], [os.path.dirname(proto_file)])

    def test_run_exits_on_protoc_error(self, monkeypatch, proto_file, tmp_path, capsys):
        monkeypatch.setenv("PROTOC", "definitely-not-a-real-protoc")
        out = tmp_path / "openapi.yaml"
        with pytest.raises(SystemExit) as exc:
            run([proto_file], str(out), "Users API", "1.0.0")
        assert exc.value.code == 1
        assert "FATAL:" in capsys.readouterr().err
        assert not out.exists()


class TestCli:
    def test_requires_title_and_version(self, proto_file, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main([proto_file, str(tmp_path / "openapi.yaml")])
        assert exc.value.code == 2


@pytest.mark.skipif(not HAS_PROTOC, reason="protoc not installed")
class TestFullPipeline:
    def test_generates_yaml(self, proto_file, tmp_path, capsys):
        out = tmp_path / "openapi.yaml"
        main([proto_file, str(out), "--openapi-title", "Users API", "--openapi-version", "1.0.0"])

        assert "Done!" in capsys.readouterr().out
        data = yaml.safe_load(out.read_text(encoding="utf-8"))
        assert data["openapi"] == "3.0.0"
        assert data["info"] == {"title": "Users API", "version": "1.0.0"}

        schemas = data["components"]["schemas"]
        assert list(schemas["User"]["properties"]) == [
            "name", "age", "status", "addresses", "nickname", "contact",
        ]
        assert schemas["User"]["properties"]["addresses"] == {
            "type": "array",
            "items": {"$ref": "#/components/schemas/Address"},
        }
        assert len(schemas["User"]["properties"]["contact"]["oneOf"]) == 2
        assert schemas["Address"]["type"] == "object"
        assert schemas["Status"]["enum"] == [0, 1]

        paths = data["paths"]
        assert set(paths) == {"/users/{id}", "/users"}
        assert set(paths["/users/{id}"]) == {"parameters", "get", "put"}
        assert paths["/users/{id}"]["put"]["tags"] == ["Users", "Admin"]
        assert "requestBody" not in paths["/users"]["post"]

    def test_generates_json(self, proto_file, tmp_path):
        out = tmp_path / "openapi.json"
        run([proto_file], str(out), "Users API", "2.0.0")
        assert '"openapi": "3.0.0"' in out.read_text(encoding="utf-8")


def _fake_protoc(tmp_path, stderr, code=1):
    script = tmp_path / "fake-protoc"
    script.write_text(f"#!/bin/sh\necho '{stderr}' >&2\nexit {code}\n", encoding="utf-8")
    script.chmod(0o755)
    return str(script)


def _descriptor_set(*files):
    fds = d2.FileDescriptorSet()
    for file in files:
        fds.file.append(file)
    return fds


class TestIncludeDirs:
    def test_parent_dirs_keep_proto_form(self):
        dirs = _include_dirs(["sub/users.proto", "users.proto", "/abs/users.proto"], ["extra"])
        assert dirs == ["sub", ".", "/abs", "extra"]

    def test_protoc_include_appended_and_deduplicated(self, monkeypatch):
        monkeypatch.setenv("PROTOC_INCLUDE", "/opt/include")
        assert _include_args(["a", "b", "a", "", "/opt/include"]) == [
            "-I", "a", "-I", "b", "-I", "/opt/include",
        ]

    def test_without_protoc_include(self, monkeypatch):
        monkeypatch.delenv("PROTOC_INCLUDE", raising=False)
        assert _include_args(["a"]) == ["-I", "a"]


class TestLoaderErrors:
    def test_nonzero_exit_carries_stderr(self, monkeypatch, proto_file, tmp_path):
        monkeypatch.setenv("PROTOC", _fake_protoc(tmp_path, "users.proto:3:1: Expected top-level statement"))
        with pytest.raises(ProtocError, match="protoc failed: users.proto:3:1: Expected top-level statement"):
            load_descriptor_set([proto_file], [os.path.dirname(proto_file)])

    @pytest.mark.skipif(not HAS_PROTOC, reason="protoc not installed")
    def test_broken_proto(self, tmp_path):
        broken = tmp_path / "broken.proto"
        broken.write_text('syntax = "proto3";\nmessage Broken {\n    string = ;\n', encoding="utf-8")
        with pytest.raises(ProtocError, match="broken.proto"):
            load_descriptor_set([str(broken)], [str(tmp_path)])


class TestRunErrors:
    def test_descriptor_error_exits(self, monkeypatch, tmp_path, capsys):
        bare = d2.FileDescriptorProto(name="bare.proto")
        monkeypatch.setattr(main_module, "load_descriptor_set", lambda protos, includes: _descriptor_set(bare))
        out = tmp_path / "openapi.yaml"
        with pytest.raises(SystemExit) as exc:
            run(["bare.proto"], str(out), "T", "1")
        assert exc.value.code == 1
        assert "FATAL: File 'bare.proto' has no source code info" in capsys.readouterr().err
        assert not out.exists()

    def test_unwritable_output_exits(self, monkeypatch, tmp_path, capsys):
        file = d2.FileDescriptorProto(name="empty.proto")
        file.source_code_info.SetInParent()
        monkeypatch.setattr(main_module, "load_descriptor_set", lambda protos, includes: _descriptor_set(file))
        out = tmp_path / "missing" / "openapi.yaml"
        with pytest.raises(SystemExit) as exc:
            run(["empty.proto"], str(out), "T", "1")
        assert exc.value.code == 1
        assert "FATAL: Failed to create file" in capsys.readouterr().err


@pytest.mark.skipif(not HAS_PROTOC, reason="protoc not installed")
class TestRelativePaths:
    def test_relative_proto_path(self, monkeypatch, tmp_path):
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "users.proto").write_text(PROTO_CONTENT, encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        run(["sub/users.proto"], "openapi.yaml", "Users API", "1.0.0")

        data = yaml.safe_load((tmp_path / "openapi.yaml").read_text(encoding="utf-8"))
        assert "User" in data["components"]["schemas"]
        assert set(data["paths"]) == {"/users/{id}", "/users"}

    def test_bare_file_name(self, monkeypatch, tmp_path):
        (tmp_path / "users.proto").write_text(PROTO_CONTENT, encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        run(["users.proto"], "openapi.json", "Users API", "1.0.0")

        assert (tmp_path / "openapi.json").exists()
