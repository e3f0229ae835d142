from uuid import UUID

TEST_TUTOR_ID = UUID('dcef54de-bc89-4388-a7a8-dba5d8327447')
TEST_TUTOR_EMAIL = 'tutor@verified-tutor.test'

TEST_PARENT_ID = UUID('e850ce9b-d934-47b9-a029-b510f39d5bbc')
TEST_PARENT_EMAIL = 'parent@verified-tutor.test'

TEST_STUDENT_ID = UUID('e46d56d4-a856-49cc-b078-bffa79d9a142')

TEST_UNRELATED_TUTOR_ID = UUID('6667e14b-f8b7-45ee-998a-48832413d4c7')
TEST_UNRELATED_TUTOR_EMAIL = 'other.tutor@verified-tutor.test'

TEST_UNRELATED_PARENT_ID = UUID('d4c17e60-08de-47c7-9ef0-33ae8aa442fb')
TEST_UNRELATED_PARENT_EMAIL = 'other.parent@verified-tutor.test'

TEST_UNRELATED_STUDENT_ID = UUID('80194ca6-fb6a-422a-bdb8-63e64e23e79e')

TEST_INACTIVE_PARENT_ID = UUID('a6934e55-9538-4c06-a7b0-545fbd4d8cee')
TEST_INACTIVE_PARENT_EMAIL = 'inactive.parent@verified-tutor.test'
