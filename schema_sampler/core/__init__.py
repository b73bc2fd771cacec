# Core building blocks shared by every stage: errors, configuration, job base class
