import unittest
from io import StringIO
from unittest.mock import MagicMock

from rich.console import Console

from shellscribe.ai.assistants import classify, generate, interpret, respond
from shellscribe.ai.assistants.classify import QueryKind
from shellscribe.ai.assistants.generate import extract_script
from shellscribe.ai.llm import ChatMessage
from shellscribe.errors import EmptyResponseError
from shellscribe.shell import OSKind


class TestQueryKind(unittest.TestCase):
    def test_known_labels(self):
        self.assertEqual(QueryKind.parse("y"), QueryKind.TASK)
        self.assertEqual(QueryKind.parse("n"), QueryKind.QUERY)
        self.assertEqual(QueryKind.parse("w"), QueryKind.DANGEROUS)

    def test_surrounding_whitespace_and_case_are_ignored(self):
        self.assertEqual(QueryKind.parse(" W\n"), QueryKind.DANGEROUS)

    def test_anything_else_is_unknown(self):
        for label in ("z", "", "yes", "y.", "?"):
            with self.subTest(label=label):
                self.assertEqual(QueryKind.parse(label), QueryKind.UNKNOWN)


class TestClassify(unittest.TestCase):
    def test_sends_prompt_as_sole_system_message(self):
        client = MagicMock()
        client.complete.return_value = " y \n"

        label = classify.classify(client, "list my files", "gpt-4o")

        self.assertEqual(label, "y")
        messages = client.complete.call_args.args[0]
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0].role, "system")
        self.assertIn("User Query: list my files", messages[0].content)
        self.assertEqual(client.complete.call_args.kwargs, {"model": "gpt-4o", "max_tokens": 50})

    def test_unexpected_label_is_returned_unvalidated(self):
        client = MagicMock()
        client.complete.return_value = "z"

        self.assertEqual(classify.classify(client, "hm", "gpt-4o"), "z")

    def test_completion_errors_propagate(self):
        client = MagicMock()
        client.complete.side_effect = EmptyResponseError("No response")

        with self.assertRaises(EmptyResponseError):
            classify.classify(client, "hm", "gpt-4o")


class TestExtractScript(unittest.TestCase):
    def test_strips_fence_lines(self):
        self.assertEqual(extract_script("```\nls -la\n```"), "ls -la")

    def test_strips_fences_with_language_and_indentation(self):
        response = "  ```bash\ndf -h\nfree -m\n   ```  "
        self.assertEqual(extract_script(response), "df -h\nfree -m")

    def test_input_without_fences_is_unchanged(self):
        script = "for f in *; do\n    echo \"$f\"\ndone"
        self.assertEqual(extract_script(script), script)

    def test_prose_outside_fences_is_kept(self):
        response = "Here is the script:\n```sh\nuptime\n```\nEnjoy."
        self.assertEqual(extract_script(response), "Here is the script:\nuptime\nEnjoy.")

    def test_idempotent(self):
        for response in ("```\nls\n```", "a\n```\nb", "plain", "", "```"):
            with self.subTest(response=response):
                once = extract_script(response)
                self.assertEqual(extract_script(once), once)

    def test_inline_backticks_are_not_fences(self):
        self.assertEqual(extract_script("echo `date`"), "echo `date`")


class TestGenerateCommand(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.output = StringIO()
        self.console = Console(file=self.output, width=200)

    def test_builds_prompt_from_host_details(self):
        self.client.complete.return_value = "```powershell\nGet-ChildItem\n```"

        command = generate.generate_command(
            self.client, OSKind.WINDOWS, "5.1.19041", "show files", "gpt-4o", console=self.console
        )

        self.assertEqual(command, "Get-ChildItem")
        system, user = self.client.complete.call_args.args[0]
        self.assertEqual(system.role, "system")
        self.assertIn("OS Information: windows", system.content)
        self.assertIn("Shell Version: 5.1.19041", system.content)
        self.assertEqual(user, ChatMessage("user", "show files"))
        self.assertEqual(self.client.complete.call_args.kwargs["max_tokens"], 256)
        self.assertEqual(self.output.getvalue(), "")

    def test_debug_echoes_generated_command(self):
        self.client.complete.return_value = "uname -a"

        generate.generate_command(
            self.client, OSKind.UNIX, "bash 5.2", "kernel?", "gpt-4o", debug=True, console=self.console
        )

        self.assertIn("Generated Command: uname -a", self.output.getvalue())


class TestRespondAndInterpret(unittest.TestCase):
    def test_generate_response_uses_small_budget(self):
        client = MagicMock()
        client.complete.return_value = "Sure, on it!"

        reply = respond.generate_response(client, respond.TASK_ACKNOWLEDGMENT, "gpt-4o")

        self.assertEqual(reply, "Sure, on it!")
        (message,) = client.complete.call_args.args[0]
        self.assertIn(respond.TASK_ACKNOWLEDGMENT, message.content)
        self.assertEqual(client.complete.call_args.kwargs["max_tokens"], 100)

    def test_interpret_embeds_query_and_output(self):
        client = MagicMock()
        client.complete.return_value = "You have two files."

        reply = interpret.interpret(client, "a.txt\nb.txt\n", "what files?", "gpt-4o")

        self.assertEqual(reply, "You have two files.")
        (message,) = client.complete.call_args.args[0]
        self.assertEqual(message.role, "system")
        self.assertIn("User Query: what files?", message.content)
        self.assertIn("Script Execution Results: a.txt\nb.txt\n", message.content)
        self.assertIn("user's language", message.content)

    def test_prompts_keep_braces_from_user_text(self):
        prompt = classify.build_classification_prompt("echo {a,b}")
        self.assertIn("echo {a,b}", prompt)
