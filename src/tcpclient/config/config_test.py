import os
import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

from configobj import ConfigObjError, ConfigObj
from hamcrest import assert_that, is_, equal_to, calling, raises

from tcpclient.config.config import config_filename, config_flavor, load_config_file_base, load_config, \
    map_os_name, apply_conf
from tcpclient.config.settings import ClientSettings, load_settings

test_configspec = [
    "value1 = string(default='def')",
    "value2 = integer(default=4)",
]


class TempDirectoryTestCase(unittest.TestCase):
    """ provides a configuration directory and a home directory that are removed after each test. """

    def setUp(self):
        self.directory = tempfile.mkdtemp()
        self.home = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.directory)
        shutil.rmtree(self.home)

    def write(self, name, *lines, directory=None):
        with open(os.path.join(directory or self.directory, name), 'w') as f:
            f.write('\n'.join(lines) + '\n')


class ConfigTestCase(TempDirectoryTestCase):

    def test_config_file_not_found(self):
        assert_that(calling(load_config_file_base).with_args(os.path.join(self.directory, 'blah.cfg')),
                    raises(IOError))

    def test_missing_optional_file_is_empty(self):
        assert_that(load_config_file_base(os.path.join(self.directory, 'blah.cfg'), must_exist=False),
                    is_(equal_to({})))

    def test_config_file_invalid_syntax(self):
        self.write('bad.cfg', '[[nested]]')
        assert_that(calling(load_config_file_base).with_args(os.path.join(self.directory, 'bad.cfg')),
                    raises(ConfigObjError, "at .*bad.cfg"))

    def test_config_filename(self):
        assert_that(config_filename(config_flavor('test', 'default'), 'dir'),
                    is_(os.path.join('dir', 'test.default.cfg')))

    def test_defaults_from_configspec(self):
        conf = load_config('test', self.directory, test_configspec, self.home)
        assert_that(conf['value1'], is_('def'))
        assert_that(conf['value2'], is_(4))

    def test_layers_override_in_order(self):
        self.write('test.default.cfg', "value1 = default", "value2 = 1")
        self.write('test.cfg', "value2 = 3")
        self.write('test.cfg', "value1 = user", directory=self.home)
        conf = load_config('test', self.directory, test_configspec, self.home)
        assert_that(conf['value1'], is_('user'))
        assert_that(conf['value2'], is_(3))

    def test_platform_layer(self):
        self.write('test.default.cfg', "value2 = 1")
        self.write('test.plan9.cfg', "value2 = 2")
        with patch('tcpclient.config.config.os_name', return_value='plan9'):
            conf = load_config('test', self.directory, test_configspec, self.home)
        assert_that(conf['value2'], is_(2))

    def test_invalid_value_fails_validation(self):
        self.write('test.cfg', "value2 = lots")
        assert_that(calling(load_config).with_args('test', self.directory, test_configspec, self.home),
                    raises(ConfigObjError, "failed validation value2"))

    def test_map_os_name(self):
        assert_that(map_os_name('Windows'), is_('windows'))
        assert_that(map_os_name('Darwin'), is_('osx'))
        assert_that(map_os_name('Linux'), is_('linux'))

    def test_apply_conf_sets_known_attributes(self):
        target = Mock(spec=['value1'])
        apply_conf(ConfigObj({'value1': 'x', 'missing_value': 'y'}), target)
        assert_that(target.value1, is_('x'))
        assert_that(hasattr(target, 'missing_value'), is_(False))


class SettingsTest(TempDirectoryTestCase):

    def test_default_settings(self):
        assert_that(load_settings(self.directory, user_directory=self.home), is_(ClientSettings()))

    def test_settings_from_file(self):
        self.write('tcpclient.cfg', "timeout = 0.5", "buffer_size = 128", "send_thread_name = out")
        settings = load_settings(self.directory, user_directory=self.home)
        assert_that(settings.timeout, is_(0.5))
        assert_that(settings.buffer_size, is_(128))
        assert_that(settings.send_thread_name, is_('out'))
        assert_that(settings.receive_thread_name, is_('tcp-receive'))

    def test_buffer_size_must_be_positive(self):
        self.write('tcpclient.cfg', "buffer_size = 0")
        assert_that(calling(load_settings).with_args(self.directory, user_directory=self.home),
                    raises(ConfigObjError, "buffer_size"))

    def test_timeout_must_be_positive(self):
        for value in ("0", "0.0", "-1"):
            with self.subTest(timeout=value):
                self.write('tcpclient.cfg', "timeout = %s" % value)
                assert_that(calling(load_settings).with_args(self.directory, user_directory=self.home),
                            raises(ConfigObjError, "timeout"))

    def test_settings_refuse_timeout_that_is_not_positive(self):
        for value in (0, -0.5, None):
            with self.subTest(timeout=value):
                assert_that(calling(ClientSettings).with_args(timeout=value), raises(ValueError))

    def test_equality(self):
        assert_that(ClientSettings(timeout=1), is_(ClientSettings(timeout=1)))
        assert_that(ClientSettings(timeout=1) != ClientSettings(timeout=2), is_(True))

    def test_repr(self):
        assert_that(repr(ClientSettings(timeout=1)),
                    is_("ClientSettings(buffer_size=64, receive_thread_name='tcp-receive', "
                        "send_thread_name='tcp-send', timeout=1)"))


if __name__ == '__main__':  # pragma: no cover
    unittest.main()
