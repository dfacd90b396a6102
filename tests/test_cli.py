import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from controller_stub_gen.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliGenerate:
    def test_generate_writes_stub_files(self, tmp_path):
        output_dir = tmp_path / "stubs"
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(FIXTURES), "-o", str(output_dir)])

        assert result.exit_code == 0, result.output
        assert (output_dir / "com/example/items/ItemControllerStub.java").exists()
        assert (output_dir / "com/example/items/ItemControllerStubBase.java").exists()
        assert (output_dir / "com/example/orders/OrderControllerStub.java").exists()
        assert "Found 2 controllers." in result.output
        assert "Generated 4 files" in result.output

    def test_generate_with_declaration_order(self, tmp_path):
        output_dir = tmp_path / "stubs"
        runner = CliRunner()
        result = runner.invoke(main, [
            "generate", str(FIXTURES / "OrderController.java"),
            "-o", str(output_dir),
            "--order", "declaration",
        ])

        assert result.exit_code == 0, result.output
        content = (output_dir / "com/example/orders/OrderControllerStub.java").read_text()
        assert "String.format(FIND_ORDER_URL, orderId, customerId)" in content

    def test_generate_uses_config_file(self, tmp_path):
        config = tmp_path / "stubgen.yaml"
        config.write_text(f"output_dir: {tmp_path / 'configured'}\nstub_suffix: Mock\n")
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(FIXTURES / "OrderController.java"), "-c", str(config)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "configured/com/example/orders/OrderControllerMock.java").exists()

    def test_invalid_config_is_reported(self, tmp_path):
        config = tmp_path / "stubgen.yaml"
        config.write_text("path_variable_order: random\n")
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(FIXTURES), "-c", str(config)])

        assert result.exit_code == 2
        assert "--config" in result.output

    def test_no_controllers_writes_nothing(self, tmp_path):
        output_dir = tmp_path / "stubs"
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(FIXTURES / "PlainService.java"), "-o", str(output_dir)])

        assert result.exit_code == 0, result.output
        assert "Generated 0 files" in result.output
        assert not output_dir.exists()

    @patch("controller_stub_gen.cli.process_round")
    def test_generate_passes_writer_and_order(self, mock_process, tmp_path):
        from controller_stub_gen.parser.base import Model

        mock_process.return_value = Model()
        runner = CliRunner()
        result = runner.invoke(main, ["generate", str(FIXTURES), "-o", str(tmp_path)])

        assert result.exit_code == 0, result.output
        mock_process.assert_called_once()
        _, kwargs = mock_process.call_args
        assert kwargs["order"] == "textual"
        assert kwargs["writer"].config.output_dir == tmp_path


class TestCliModel:
    def test_model_saved_as_json(self, tmp_path):
        output_file = tmp_path / "model.json"
        runner = CliRunner()
        result = runner.invoke(main, ["model", str(FIXTURES), "-o", str(output_file)])

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text())
        resources = data["controllers"]["com.example.orders.OrderController"]["resources"]
        find_order = resources["com.example.orders.OrderController.findOrder(Long,String)"]
        assert find_order["sub_resource"] == "/customers/%s/orders/%s"
        assert find_order["http_method"] == "GET"
        assert find_order["path_variable_order"] == ["customerId", "orderId"]

    def test_model_printed(self):
        runner = CliRunner()
        result = runner.invoke(main, ["model", str(FIXTURES / "OrderController.java")])

        assert result.exit_code == 0, result.output
        assert '"method_name": "FindOrder"' in result.output


class TestCliCheck:
    def test_check_passes_for_fixtures(self):
        runner = CliRunner()
        result = runner.invoke(main, ["check", str(FIXTURES)])

        assert result.exit_code == 0, result.output
        assert "All endpoints OK." in result.output

    def test_check_reports_problems(self, tmp_path):
        source = tmp_path / "BrokenController.java"
        source.write_text(
            "package com.example;\n"
            "@RestController\n"
            "public class BrokenController {\n"
            '    @GetMapping("/items/{id}")\n'
            "    public Item get(@RequestParam Long id) { return null; }\n"
            "}\n"
        )
        runner = CliRunner()
        result = runner.invoke(main, ["check", str(source)])

        assert result.exit_code == 1
        assert "com.example.BrokenController.get(Long): unresolved placeholders {id}" in result.output
