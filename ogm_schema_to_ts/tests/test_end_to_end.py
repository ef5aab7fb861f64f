import json
from pathlib import Path
from unittest import TestCase

from ogm_schema_to_ts import GeneratorConfig, PipelineGenerator, generate
from ogm_schema_to_ts.pipeline import NODES_FILE, OPTIONS_FILE, RESOURCES_FILE

TEST_DATA = Path(__file__).parent / "test_data"

EXPECTED_TASK = """/**
 * A unit of work
 */
export interface Task extends Base {
  title: string
  description?: string | null
  status?: "todo" | "done"
  estimate?: number | string | null
}"""

EXPECTED_USER = """export interface User extends Base {
  name: string
  /**
   * Contact address
   */
  email: string
}"""

EXPECTED_RESOURCE = """export interface TaskResource extends AbstractResource<
  'task',
  Task,
  {
    assigned_to: Mount<User, Link, false>
  }
> {}"""


class TestEndToEnd(TestCase):
    """Generation of the task/user example schema"""

    def setUp(self):
        with open(TEST_DATA / "task_schema.json") as f:
            self.schema = json.load(f)
        self.config = GeneratorConfig(add_generation_comment=False)

    def test_nodes_module(self):
        nodes = generate(self.schema, self.config)

        self.assertTrue(nodes.startswith("export interface Base {\n  uid: string\n"))
        self.assertIn("export interface Link extends Base {}", nodes)
        self.assertIn("export type ResourceEdge<T, U> = {", nodes)
        self.assertIn(EXPECTED_USER, nodes)
        self.assertIn(EXPECTED_TASK, nodes)
        self.assertTrue(nodes.endswith("}\n"))

    def test_relation_is_not_a_field(self):
        nodes = generate(self.schema, self.config)
        task = nodes[nodes.index("export interface Task") :]
        self.assertNotIn("assigned_to", task)

    def test_aliases_are_inlined(self):
        nodes = generate(self.schema, self.config)
        self.assertNotIn("export type TodoOrDone", nodes)
        self.assertNotIn("export type NumberOrStringOrNull", nodes)

    def test_resources_and_options(self):
        result = PipelineGenerator(self.schema, self.config).generate_resources()

        self.assertEqual(result.names(), [NODES_FILE, RESOURCES_FILE, OPTIONS_FILE])

        resources = result[RESOURCES_FILE]
        self.assertTrue(resources.startswith("import type {\n  ResourceEdge,\n"))
        self.assertIn("} from '@malevichai/nova-ts'", resources)
        self.assertIn("import type { Task, User } from './nodes'", resources)
        self.assertIn(EXPECTED_RESOURCE, resources)

        options = result[OPTIONS_FILE]
        self.assertIn("export const TaskResourceOptions: ResourceOptions = {", options)
        self.assertIn('"pivot_key": "task"', options)
        self.assertIn("TaskResource: TaskResourceOptions,", options)

    def test_resource_descriptor(self):
        result = PipelineGenerator(self.schema, self.config).generate_resources()

        self.assertEqual(len(result.resources), 1)
        descriptor = result.resources[0]
        self.assertEqual(descriptor.name, "TaskResource")
        self.assertEqual(descriptor.pivot_key, "task")
        self.assertEqual(descriptor.pivot_type, "Task")
        self.assertEqual(list(descriptor.mounts), ["assigned_to"])
        mount = descriptor.mounts["assigned_to"]
        self.assertEqual(mount.target_type, "User")
        self.assertEqual(mount.link_type, "Link")
        self.assertFalse(mount.is_array)
        self.assertFalse(mount.is_resource)

    def test_generation_comment(self):
        nodes = generate(self.schema, GeneratorConfig())
        first_line = nodes.splitlines()[0]
        self.assertTrue(first_line.startswith("// Generated by ogm_schema_to_ts v"))

    def test_inline_unions(self):
        config = GeneratorConfig(add_generation_comment=False, use_inline_unions=True)
        nodes = generate(self.schema, config)
        self.assertIn(EXPECTED_TASK, nodes)

    def test_kept_aliases(self):
        config = GeneratorConfig(add_generation_comment=False, inline_aliases=False)
        nodes = generate(self.schema, config)
        self.assertIn('export type TodoOrDone = "todo" | "done"', nodes)
        self.assertIn("  status?: TodoOrDone\n", nodes)

    def test_aliases_with_equal_names_keep_their_types(self):
        schema = {
            "components": {
                "schemas": {
                    "A": {"_malevich_ogm_node": {"name": "A"}, "properties": {"x": {"enum": ["1", "2"]}}},
                    "B": {"_malevich_ogm_node": {"name": "B"}, "properties": {"y": {"enum": [1, 2]}}},
                }
            }
        }

        kept = generate(schema, GeneratorConfig(add_generation_comment=False, inline_aliases=False))
        self.assertIn('export type Value1OrValue2 = "1" | "2"', kept)
        self.assertIn("export type Value1OrValue22 = 1 | 2", kept)
        self.assertIn("  y?: Value1OrValue22\n", kept)

        inlined = generate(schema, self.config)
        self.assertIn('  x?: "1" | "2"\n', inlined)
        self.assertIn("  y?: 1 | 2\n", inlined)

    def test_runs_are_independent(self):
        generator = PipelineGenerator(self.schema, self.config)
        first = generator.generate_nodes()
        second = generator.generate_nodes()
        self.assertEqual(first, second)

    def test_write(self):
        import tempfile

        generator = PipelineGenerator(self.schema, self.config)
        result = generator.generate_resources(options_json=True)
        with tempfile.TemporaryDirectory() as tmp:
            written = generator.write(result, Path(tmp) / "generated")
            self.assertEqual(sorted(p.name for p in written), ["nodes.ts", "options.json", "options.ts", "resources.ts"])
            for path in written:
                self.assertEqual(path.read_text(), result[path.name])
            options = json.loads((Path(tmp) / "generated" / "options.json").read_text())
            self.assertEqual(options["TaskResource"]["info"]["pivot_type"], "Task")
