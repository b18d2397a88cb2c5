import unittest

from nsfeed.config import PipelineConfig
from nsfeed.errors import ErrorKind
from nsfeed.pipeline import Pipeline

END_TO_END = [
    "update delete host1.example.com. a",
    "update add host1.example.com. 3600 a 192.0.2.5",
    "send",
    "update delete 5.2.0.192.in-addr.arpa.",
    "update add 5.2.0.192.in-addr.arpa. 3600 ptr host1.example.com.",
    "send",
]


class TestPipeline(unittest.TestCase):

    def setUp(self):
        self.config = PipelineConfig(domain="example.com", server="192.0.2.53")

    def test_inventory_line_end_to_end(self):
        result = Pipeline(self.config).run(["site1,bldg1,host1,192.0.2.5,note"])
        self.assertEqual(result.directives, END_TO_END)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.records, 1)

    def test_remove_mode_end_to_end(self):
        config = PipelineConfig(domain="example.com", remove=True)
        result = Pipeline(config).run(["site1,bldg1,host1,192.0.2.5,note"])
        self.assertEqual(result.directives, [
            "update delete host1.example.com. a",
            "send",
            "update delete 5.2.0.192.in-addr.arpa.",
            "send",
        ])

    def test_blank_and_comment_lines_produce_nothing(self):
        result = Pipeline(self.config).run(["", "# just a note", "! legacy comment"])
        self.assertEqual(result.directives, [])
        self.assertEqual(result.errors, [])

    def test_bad_lines_are_reported_with_line_numbers_and_skipped(self):
        pipeline = Pipeline(self.config)
        result = pipeline.run([
            "# header",
            "lonelytoken",
            "host2,not-an-ip",
            "",
            "192.0.2.5,host1",
        ])
        self.assertEqual(result.directives, END_TO_END)
        self.assertEqual([e.line_number for e in result.errors], [2, 3])
        self.assertEqual(result.errors[0].kind, ErrorKind.ILLEGAL_RECORD)
        self.assertEqual(result.errors[1].kind, ErrorKind.ILLEGAL_ADDRESS)
        self.assertTrue(str(result.errors[1]).startswith("3: "))
        self.assertEqual(pipeline.line_number, 5)

    def test_order_is_preserved(self):
        result = Pipeline(self.config).run(["b,192.0.2.2", "a,192.0.2.1"])
        self.assertEqual(result.directives[0], "update delete b.example.com. a")
        self.assertEqual(result.directives[6], "update delete a.example.com. a")

    def test_counter_continues_across_runs(self):
        pipeline = Pipeline(self.config)
        pipeline.run(["host1,192.0.2.5"])
        result = pipeline.run(["bogus"])
        self.assertEqual(result.errors[0].line_number, 2)

    def test_unusable_hostnames_do_not_reach_the_script(self):
        config = PipelineConfig(domain="example.com", drop_suffix=False, reverse=False)
        result = Pipeline(config).run(["my host,192.0.2.5", ".x,192.0.2.6", "host3,192.0.2.7"])
        self.assertEqual(result.directives, [
            "update delete host3.example.com a",
            "update add host3.example.com 3600 a 192.0.2.7",
            "send",
        ])
        self.assertEqual([e.line_number for e in result.errors], [1, 2])
        self.assertTrue(all(e.kind == ErrorKind.ILLEGAL_HOSTNAME for e in result.errors))

    def test_empty_first_label_with_forced_domain(self):
        result = Pipeline(self.config).run([".x,192.0.2.6"])
        self.assertEqual(result.directives, [])
        self.assertEqual(result.errors[0].kind, ErrorKind.ILLEGAL_HOSTNAME)

    def test_render_starts_with_server_directive(self):
        script, result = Pipeline(self.config).render(["host1,192.0.2.5"])
        self.assertEqual(script, "\n".join(["server 192.0.2.53", *END_TO_END]) + "\n")
        self.assertEqual(result.records, 1)

    def test_keep_suffix(self):
        config = PipelineConfig(domain="example.com", drop_suffix=False, reverse=False)
        result = Pipeline(config).run(["Host1.Other.com,192.0.2.5", "host2,192.0.2.6"])
        self.assertEqual(result.directives[0], "update delete host1.other.com a")
        self.assertEqual(result.directives[3], "update delete host2.example.com a")


if __name__ == '__main__':
    unittest.main()
